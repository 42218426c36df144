"""
Application error taxonomy.

Lower layers raise these; only the API layer turns them into responses,
using ``status_code`` and the client-safe ``message``.
"""

from __future__ import annotations


class MealPlannerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MealPlannerError):
    status_code = 400


class NotFoundError(MealPlannerError):
    status_code = 404


class UpstreamError(MealPlannerError):
    pass


class StorageError(MealPlannerError):
    pass


class ConfigurationError(MealPlannerError):
    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required configuration: {', '.join(missing)}")
        self.missing = missing
