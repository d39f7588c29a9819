from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class PermissionResponse(BaseModel):
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    resource: str
    action: str
    category: str
    is_sensitive: bool = False

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9_]+$")
    display_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permissions: List[str] = []


class RoleUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permissions: Optional[List[str]] = None


class RoleResponse(BaseModel):
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    is_system: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleWithPermissionsResponse(RoleResponse):
    permissions: List[str] = []


class RoleSummary(BaseModel):
    id: str
    name: str
    display_name: str


class OverrideSummary(BaseModel):
    grants: List[str] = []
    denials: List[str] = []


class UserPermissionContext(BaseModel):
    user_id: str
    is_super_admin: bool
    roles: List[RoleSummary] = []
    effective_permissions: List[str] = []
    overrides: OverrideSummary = OverrideSummary()


class PermissionCheckResult(BaseModel):
    allowed: bool
    reason: Literal["super_admin", "role_permission", "user_grant", "user_denial", "no_permission"]


class UserRoleAssign(BaseModel):
    user_id: str = Field(..., min_length=1)
    role_id: str = Field(..., min_length=1)


class UserPermissionOverrideSet(BaseModel):
    user_id: str = Field(..., min_length=1)
    permission: str = Field(..., min_length=1)
    granted: bool


class UserPermissionOverrideRemove(BaseModel):
    user_id: str = Field(..., min_length=1)
    permission: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str
