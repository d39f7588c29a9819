"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.security.utils import get_authorization_scheme_param
from typing import Optional

from admin_rbac.core.exceptions import ForbiddenError, UnauthenticatedError
from admin_rbac.core.guard import evaluate
from admin_rbac.core.routing import PermissionRequirement, all_of, any_of, requires
from admin_rbac.modules.rbac.resolver import PermissionResolver
from admin_rbac.modules.rbac.service import RBACService

# auto_error=False: a missing header is reported as 401 by the permission checks, not 403
security = HTTPBearer(auto_error=False)


def extract_bearer_token(request: Request) -> Optional[str]:
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not token:
        return None
    return token


async def resolve_user_id(request: Request, token: Optional[str]) -> Optional[str]:
    """Resolve the acting user once per request; the middleware may already have done it"""
    if hasattr(request.state, "user_id"):
        return request.state.user_id
    user_id = await request.app.state.identity_provider.get_user_id(token)
    request.state.user_id = user_id
    return user_id


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Current user id, or None for anonymous requests"""
    token = credentials.credentials if credentials else None
    return await resolve_user_id(request, token)


def get_resolver(request: Request) -> PermissionResolver:
    return request.app.state.resolver


def get_rbac_service(request: Request) -> RBACService:
    return RBACService(request.app.state.repository, request.app.state.resolver)


async def require_user_id(user_id: Optional[str] = Depends(get_current_user_id)) -> str:
    if not user_id:
        raise UnauthenticatedError("Authentication required")
    return user_id


def _require(requirement: PermissionRequirement):
    async def check_permission(
        user_id: Optional[str] = Depends(get_current_user_id),
        resolver: PermissionResolver = Depends(get_resolver)
    ) -> str:
        denial = await evaluate(resolver, user_id, requirement)
        if denial is not None:
            raise denial.to_error()
        return user_id
    return check_permission


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    return _require(requires(required_permission))


def require_any_permission(*permissions: str):
    return _require(any_of(*permissions))


def require_all_permissions(*permissions: str):
    return _require(all_of(*permissions))


def require_super_admin():
    async def check_super_admin(
        user_id: str = Depends(require_user_id),
        resolver: PermissionResolver = Depends(get_resolver)
    ) -> str:
        if not await resolver.is_super_admin(user_id):
            raise ForbiddenError("Super admin access required")
        return user_id
    return check_super_admin
