from fastapi import APIRouter, Depends, status
from typing import Dict, List

from admin_rbac.core.dependencies import (
    get_rbac_service,
    get_resolver,
    require_any_permission,
    require_permission,
    require_user_id,
)
from admin_rbac.core.exceptions import NotFoundError
from admin_rbac.modules.rbac.resolver import PermissionResolver
from admin_rbac.modules.rbac.schemas import (
    MessageResponse, PermissionResponse, RoleCreate, RoleUpdate,
    RoleWithPermissionsResponse, UserPermissionContext,
    UserPermissionOverrideRemove, UserPermissionOverrideSet, UserRoleAssign
)
from admin_rbac.modules.rbac.service import RBACService

router = APIRouter(prefix="/admin/rbac", tags=["rbac"])


# Role endpoints
@router.get("/roles", response_model=List[RoleWithPermissionsResponse])
async def list_roles(
    user_id: str = Depends(require_any_permission("team.view", "team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    """List all roles with their permission names"""
    return await service.list_roles()


@router.post("/roles", response_model=RoleWithPermissionsResponse, status_code=201)
async def create_role(
    role_data: RoleCreate,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    """Create a custom (non-system) role"""
    return await service.create_role(user_id, role_data)


@router.get("/roles/{role_id}", response_model=RoleWithPermissionsResponse)
async def get_role(
    role_id: str,
    user_id: str = Depends(require_any_permission("team.view", "team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    return await service.get_role(role_id)


@router.put("/roles/{role_id}", response_model=RoleWithPermissionsResponse)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    """Update role metadata; permissions can only be replaced on custom roles"""
    return await service.update_role(user_id, role_id, role_data)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    await service.delete_role(user_id, role_id)


# Permission catalog
@router.get("/permissions", response_model=Dict[str, List[PermissionResponse]])
async def list_permissions(
    user_id: str = Depends(require_any_permission("team.view", "team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    """All permissions grouped by category"""
    return await service.list_permissions_by_category()


@router.get("/my-permissions", response_model=UserPermissionContext)
async def my_permissions(
    user_id: str = Depends(require_user_id),
    resolver: PermissionResolver = Depends(get_resolver)
):
    """Roles, overrides and effective permissions of the current user"""
    context = await resolver.get_user_permission_context(user_id)
    if context is None:
        raise NotFoundError("User not found")
    return context


# User role assignment
@router.post("/user-roles", response_model=MessageResponse, status_code=201)
async def assign_user_role(
    assignment: UserRoleAssign,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    await service.assign_role(user_id, assignment.user_id, assignment.role_id)
    return MessageResponse(message="Role assigned successfully")


@router.delete("/user-roles", response_model=MessageResponse)
async def remove_user_role(
    assignment: UserRoleAssign,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    await service.remove_role(user_id, assignment.user_id, assignment.role_id)
    return MessageResponse(message="Role removed successfully")


# User permission overrides
@router.post("/user-permissions", response_model=MessageResponse)
async def set_user_permission(
    override: UserPermissionOverrideSet,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    await service.set_permission_override(user_id, override.user_id, override.permission, override.granted)
    action = "granted" if override.granted else "denied"
    return MessageResponse(message=f"Permission {override.permission} {action}")


@router.delete("/user-permissions", response_model=MessageResponse)
async def remove_user_permission(
    override: UserPermissionOverrideRemove,
    user_id: str = Depends(require_permission("team.manage_roles")),
    service: RBACService = Depends(get_rbac_service)
):
    await service.remove_permission_override(user_id, override.user_id, override.permission)
    return MessageResponse(message=f"Override for {override.permission} removed")
