import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from typing import Optional

from admin_rbac.config import settings, Settings
from admin_rbac.core.cache import PermissionCache
from admin_rbac.core.exceptions import RBACError
from admin_rbac.core.middleware import RBACMiddleware
from admin_rbac.database.supabase_client import SupabaseClient
from admin_rbac.modules.auth import routes as auth_routes
from admin_rbac.modules.auth.service import AuthService
from admin_rbac.modules.rbac import routes as rbac_routes
from admin_rbac.modules.rbac.repository import RBACRepository
from admin_rbac.modules.rbac.resolver import PermissionResolver
from admin_rbac.modules.rbac.seeder import RBACSeeder

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def configure_rbac(
    app: FastAPI,
    repository,
    identity_provider,
    app_settings: Settings,
    cache: Optional[PermissionCache] = None
) -> None:
    """Attach the store, resolver, seeder and identity provider to app.state"""
    cache = cache if cache is not None else PermissionCache(ttl_seconds=app_settings.permission_cache_ttl_seconds)
    resolver = PermissionResolver(repository, cache)
    app.state.repository = repository
    app.state.resolver = resolver
    app.state.seeder = RBACSeeder(repository, resolver, admin_role_name=app_settings.admin_role_name)
    app.state.identity_provider = identity_provider


def create_app(
    repository=None,
    identity_provider=None,
    app_settings: Settings = settings,
    cache: Optional[PermissionCache] = None
) -> FastAPI:
    limiter = Limiter(key_func=get_remote_address, default_limits=[app_settings.rate_limit])
    app = FastAPI(
        title=app_settings.app_name,
        debug=app_settings.debug,
        redirect_slashes=False,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    if repository is not None:
        configure_rbac(app, repository, identity_provider, app_settings, cache)

    @app.exception_handler(RBACError)
    async def rbac_exception_handler(request: Request, exc: RBACError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if app_settings.is_production:
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # Last added runs first: CORS, security headers, rate limiting, then authorization
    app.add_middleware(
        RBACMiddleware,
        protected_prefixes=app_settings.get_protected_prefixes(),
        auto_seed=app_settings.auto_seed_enabled,
    )
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include module routes
    app.include_router(auth_routes.router, prefix="/api")
    app.include_router(rbac_routes.router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        logger.info("Application startup")
        if not hasattr(app.state, "repository"):
            service_client = await SupabaseClient.get_service_client()
            auth_client = await SupabaseClient.get_client()
            configure_rbac(
                app,
                RBACRepository(service_client),
                identity_provider or AuthService(auth_client),
                app_settings,
                cache,
            )
            logger.info("RBAC store connected to %s", app_settings.supabase_url)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutdown")

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {app_settings.app_name}", "status": "healthy"}

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    @limiter.exempt
    async def ready():
        """Readiness probe: ready once the RBAC store is attached."""
        if not hasattr(app.state, "repository"):
            return JSONResponse(status_code=503, content={"status": "starting"})
        return {"status": "ready", "seeded": app.state.seeder.done}

    return app


app = create_app()
