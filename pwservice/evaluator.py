"""
pwservice.evaluator

Password strength checks:
- validate_password(password, requirements): requirement-driven verdict,
  score (0-100 in steps of 25), failures and strength label
- strength_score(password): fixed rubric used when logging generated passwords
- strength_label(score): map a score to one of four tiers

Each of the four criteria (length, uppercase, digit, symbol) is worth 25
points. In validate_password a criterion the caller did not request always
earns its 25 points.
"""

from dataclasses import dataclass, field
import re
from typing import Any, Dict, List, Mapping

from .generator import parse_bool, parse_int

DEFAULT_MIN_LENGTH = 8
POINTS_PER_CRITERION = 25

_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SYMBOL_RE = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class ValidationRequirements:
    min_length: int = DEFAULT_MIN_LENGTH
    require_uppercase: bool = False
    require_numbers: bool = False
    require_symbols: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ValidationRequirements":
        kwargs: Dict[str, Any] = {}
        if data.get("minLength") is not None:
            kwargs["min_length"] = parse_int(data["minLength"], "minLength")
        for wire, attr in (
            ("requireUppercase", "require_uppercase"),
            ("requireNumbers", "require_numbers"),
            ("requireSymbols", "require_symbols"),
        ):
            if data.get(wire) is not None:
                kwargs[attr] = parse_bool(data[wire])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minLength": self.min_length,
            "requireUppercase": self.require_uppercase,
            "requireNumbers": self.require_numbers,
            "requireSymbols": self.require_symbols,
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    score: int
    failures: List[str] = field(default_factory=list)
    strength: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "failures": list(self.failures),
            "strength": self.strength,
        }


def strength_label(score: int) -> str:
    if score >= 100:
        return "Strong"
    if score >= 75:
        return "Moderate"
    if score >= 50:
        return "Weak"
    return "Very weak"


def validate_password(password: str, requirements: ValidationRequirements) -> ValidationResult:
    """
    Check password against requirements and score it.
    """
    failures: List[str] = []
    score = 0

    if len(password) < requirements.min_length:
        failures.append(
            f"Minimum length of {requirements.min_length} not reached (has {len(password)})."
        )
    else:
        score += POINTS_PER_CRITERION

    checks = (
        (requirements.require_uppercase, _UPPER_RE, "Must contain at least one uppercase letter."),
        (requirements.require_numbers, _DIGIT_RE, "Must contain at least one number."),
        (requirements.require_symbols, _SYMBOL_RE, "Must contain at least one symbol."),
    )
    for required, pattern, message in checks:
        if not required or pattern.search(password):
            score += POINTS_PER_CRITERION
        else:
            failures.append(message)

    return ValidationResult(
        is_valid=not failures,
        score=score,
        failures=failures,
        strength=strength_label(score),
    )


def strength_score(password: str) -> int:
    score = 0
    if len(password) >= DEFAULT_MIN_LENGTH:
        score += POINTS_PER_CRITERION
    if _UPPER_RE.search(password):
        score += POINTS_PER_CRITERION
    if _DIGIT_RE.search(password):
        score += POINTS_PER_CRITERION
    if _SYMBOL_RE.search(password):
        score += POINTS_PER_CRITERION
    return score
