from admin_rbac.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
