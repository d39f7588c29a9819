import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Iterable, Optional

from admin_rbac.config.route_permissions import API_ROUTE_TABLE
from admin_rbac.core.dependencies import extract_bearer_token, resolve_user_id
from admin_rbac.core.guard import Denial, RequestContext, guard_request
from admin_rbac.core.routing import RouteTable, normalize_path

logger = logging.getLogger(__name__)


class RBACMiddleware(BaseHTTPMiddleware):
    """
    Authorizes every request under a protected prefix against the route table.

    Runs the bootstrap seeder first (a no-op after the first success), then
    passes the request through guard_request with the downstream app as the
    inner handler. Denials are returned as JSON without reaching the route.
    """

    def __init__(
        self,
        app,
        protected_prefixes: Iterable[str] = ("/api",),
        auto_seed: bool = True,
        route_table: Optional[RouteTable] = None
    ):
        super().__init__(app)
        self.protected_prefixes = [p.rstrip("/") for p in protected_prefixes]
        self.auto_seed = auto_seed
        self.route_table = route_table if route_table is not None else API_ROUTE_TABLE

    def is_protected(self, path: str) -> bool:
        return any(path == prefix or path.startswith(prefix + "/") for prefix in self.protected_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = normalize_path(request.url.path)
        if not self.is_protected(path):
            return await call_next(request)

        state = request.app.state
        if self.auto_seed:
            await state.seeder.auto_seed_if_needed()

        requirement = self.route_table.lookup(path, request.method)
        user_id = None
        if requirement is not None:
            user_id = await resolve_user_id(request, extract_bearer_token(request))

        async def handler(ctx: RequestContext):
            return await call_next(ctx.request)

        ctx = RequestContext(user_id=user_id, path=path, method=request.method, request=request)
        result = await guard_request(ctx, requirement, handler, state.resolver)
        if isinstance(result, Denial):
            return JSONResponse(status_code=result.status_code, content=result.to_dict())
        return result
