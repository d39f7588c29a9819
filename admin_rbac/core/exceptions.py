"""
RBAC error taxonomy.

Every error carries an HTTP status code and a human-readable message so the
HTTP layer can serialize it without knowing where it came from.
"""

from typing import List, Optional


class RBACError(Exception):
    status_code = 500
    label = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.label
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.label, "message": self.message}


class UnauthenticatedError(RBACError):
    status_code = 401
    label = "Unauthorized"


class ForbiddenError(RBACError):
    status_code = 403
    label = "Forbidden"

    def __init__(self, message: Optional[str] = None, missing: Optional[List[str]] = None):
        super().__init__(message or "Permission denied")
        self.missing = list(missing or [])

    def to_dict(self) -> dict:
        return {**super().to_dict(), "missing": self.missing}


class NotFoundError(RBACError):
    status_code = 404
    label = "Not found"


class RBACValidationError(RBACError):
    status_code = 400
    label = "Validation error"


class SeedingTransientError(RBACError):
    """Seeding failed; logged by the seeder and retried on the next request"""
    label = "Seeding failed"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
