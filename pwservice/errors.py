"""
pwservice.errors
Input-validation errors raised by the generator, evaluator and request layer.
Each carries the HTTP status the web layer reports it with.
"""

from typing import Any, Dict, Optional


class PasswordServiceError(ValueError):
    """Base class for caller-visible, recoverable input errors."""

    code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidLength(PasswordServiceError):
    pass


class NoCategoriesEnabled(PasswordServiceError):
    pass


class CategoryExhausted(PasswordServiceError):
    def __init__(self, category: str):
        super().__init__(
            f"Category '{category}' is empty after applying exclusions.",
            {"category": category},
        )
        self.category = category


class InvalidCount(PasswordServiceError):
    pass


class MalformedInput(PasswordServiceError):
    pass


class MissingField(PasswordServiceError):
    code = 422

    def __init__(self, field: str):
        super().__init__(f"Field '{field}' is required.", {"field": field})
        self.field = field
