from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Preferred for RBAC writes (bypasses RLS)

    # RBAC
    permission_cache_ttl_seconds: float = 300  # 5 minutes
    auto_seed_enabled: bool = True
    protected_path_prefixes: str = "/api"
    admin_role_name: str = "admin"  # legacy user.role value used by the first-admin bootstrap

    # App
    app_name: str = "admin-rbac"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:4321,http://127.0.0.1:3000,http://127.0.0.1:4321"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_protected_prefixes(self) -> List[str]:
        return [p.strip().rstrip("/") for p in self.protected_path_prefixes.split(",") if p.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
