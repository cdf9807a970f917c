"""
pwservice
Password generation, bulk generation and strength validation as a small HTTP service.
"""

from .errors import (
    CategoryExhausted,
    InvalidCount,
    InvalidLength,
    MalformedInput,
    MissingField,
    NoCategoriesEnabled,
    PasswordServiceError,
)
from .evaluator import (
    ValidationRequirements,
    ValidationResult,
    strength_label,
    strength_score,
    validate_password,
)
from .generator import GenerationOptions, generate, generate_multiple, validate_options

__version__ = "1.0.0"
