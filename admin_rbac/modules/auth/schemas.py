from pydantic import BaseModel
from typing import List, Optional


class CurrentUserResponse(BaseModel):
    user_id: str
    is_super_admin: bool
    has_admin_access: bool


class PageAccessResponse(BaseModel):
    path: str
    allowed: bool
    required: Optional[List[str]] = None
