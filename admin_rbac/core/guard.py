"""
Request guard.

guard_request() is an interceptor: it takes the request context, the
required permission expression and the inner handler, and returns
either the handler's result or a Denial. It never raises for an
authorization outcome and never allows a request when permission
resolution fails.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Union

from admin_rbac.core.exceptions import ForbiddenError, RBACError, UnauthenticatedError
from admin_rbac.core.routing import RequirementLike, coerce_requirement

logger = logging.getLogger(__name__)

UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
SERVER_ERROR = "server_error"

_LABELS = {
    UNAUTHENTICATED: UnauthenticatedError.label,
    FORBIDDEN: ForbiddenError.label,
    SERVER_ERROR: RBACError.label,
}


@dataclass(frozen=True)
class Denial:
    kind: str
    status_code: int
    message: str
    missing: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return _LABELS[self.kind]

    def to_dict(self) -> dict:
        return {"error": self.label, "message": self.message, "missing": list(self.missing)}

    def to_error(self) -> RBACError:
        if self.kind == UNAUTHENTICATED:
            return UnauthenticatedError(self.message)
        if self.kind == FORBIDDEN:
            return ForbiddenError(self.message, self.missing)
        return RBACError(self.message)


def unauthenticated() -> Denial:
    return Denial(UNAUTHENTICATED, 401, "Authentication required")


def forbidden(message: str, missing: List[str]) -> Denial:
    return Denial(FORBIDDEN, 403, message, list(missing))


def server_error() -> Denial:
    return Denial(SERVER_ERROR, 500, "Failed to verify permissions")


@dataclass
class RequestContext:
    user_id: Optional[str]
    path: str = ""
    method: str = "GET"
    request: Any = None


Handler = Callable[[RequestContext], Awaitable[Any]]


async def evaluate(resolver, user_id: Optional[str], requirement: RequirementLike) -> Optional[Denial]:
    """Check one requirement for one user; None means allowed"""
    if not user_id:
        return unauthenticated()

    expression = coerce_requirement(requirement)
    try:
        granted = await resolver.get_effective_permissions(user_id)
    except Exception:
        logger.exception("Permission resolution failed for user %s", user_id)
        return server_error()

    missing = expression.missing(granted)
    if missing:
        logger.warning("User %s denied: missing %s", user_id, ", ".join(missing))
        return forbidden(f"Permission denied. {expression.describe()}", missing)
    return None


async def guard_request(
    ctx: RequestContext,
    requirement: Optional[RequirementLike],
    handler: Handler,
    resolver
) -> Union[Denial, Any]:
    """Run handler(ctx) only if ctx.user_id satisfies requirement; None means unrestricted"""
    if requirement is not None:
        denial = await evaluate(resolver, ctx.user_id, requirement)
        if denial is not None:
            logger.debug("Denied %s %s: %s", ctx.method, ctx.path, denial.kind)
            return denial
    return await handler(ctx)
