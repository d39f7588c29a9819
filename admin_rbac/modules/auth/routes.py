from fastapi import APIRouter, Depends

from admin_rbac.config.route_permissions import get_page_permission, has_page_access
from admin_rbac.core.dependencies import get_resolver, require_user_id
from admin_rbac.core.routing import normalize_path
from admin_rbac.modules.auth.schemas import CurrentUserResponse, PageAccessResponse
from admin_rbac.modules.rbac.resolver import PermissionResolver

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    user_id: str = Depends(require_user_id),
    resolver: PermissionResolver = Depends(get_resolver)
):
    """Get current user's admin status"""
    return CurrentUserResponse(
        user_id=user_id,
        is_super_admin=await resolver.is_super_admin(user_id),
        has_admin_access=await resolver.has_admin_access(user_id),
    )


@router.get("/page-access", response_model=PageAccessResponse)
async def check_page_access(
    path: str,
    user_id: str = Depends(require_user_id),
    resolver: PermissionResolver = Depends(get_resolver)
):
    """Whether the current user may open an admin page"""
    is_super_admin = await resolver.is_super_admin(user_id)
    permissions = await resolver.get_effective_permissions(user_id)
    requirement = get_page_permission(path)
    return PageAccessResponse(
        path=normalize_path(path),
        allowed=has_page_access(permissions, is_super_admin, path),
        required=list(requirement.permissions) if requirement else None,
    )
