"""
pwservice.generator
Secure password generator using Python's secrets module.

Every draw goes through secrets.randbelow, which rejects out-of-range samples
instead of reducing modulo the range, so index selection is unbiased.
"""

from dataclasses import dataclass
from secrets import randbelow
import string
from typing import Any, Dict, List, Mapping, Tuple

from .errors import (
    CategoryExhausted,
    InvalidCount,
    InvalidLength,
    MalformedInput,
    NoCategoriesEnabled,
)


UPPER = string.ascii_uppercase
LOWER = string.ascii_lowercase
DIGITS = string.digits
DEFAULT_SYMBOLS = "!@#$%^&*()-_=+[]{}|;:,.<>?"
AMBIGUOUS = "Il1O0o"

MIN_LENGTH = 4
MAX_LENGTH = 128
MAX_COUNT = 100

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def parse_bool(value: Any) -> bool:
    """Loose boolean parsing for query-string and JSON values."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def parse_int(value: Any, field: str) -> int:
    """Accept ints and integer strings only; floats are never truncated."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise MalformedInput(f"Field '{field}' must be an integer.", {"field": field})
    try:
        return int(value)
    except ValueError:
        raise MalformedInput(f"Field '{field}' must be an integer.", {"field": field}) from None


@dataclass(frozen=True)
class GenerationOptions:
    length: int = 16
    include_upper: bool = True
    include_lower: bool = True
    include_digits: bool = True
    include_symbols: bool = True
    avoid_ambiguous: bool = False
    exclude_chars: str = ""
    require_each_category: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GenerationOptions":
        """
        Build options from request fields (query string or JSON body).
        Unset fields keep their defaults.
        """
        kwargs: Dict[str, Any] = {}
        if data.get("length") is not None:
            kwargs["length"] = parse_int(data["length"], "length")
        flags = {
            "includeUppercase": "include_upper",
            "includeLowercase": "include_lower",
            "includeNumbers": "include_digits",
            "includeSymbols": "include_symbols",
            "excludeAmbiguous": "avoid_ambiguous",
            "requireEach": "require_each_category",
        }
        for field, attr in flags.items():
            if data.get(field) is not None:
                kwargs[attr] = parse_bool(data[field])
        if data.get("exclude") is not None:
            kwargs["exclude_chars"] = str(data["exclude"])
        return cls(**kwargs)

    def validate(self) -> None:
        if not MIN_LENGTH <= self.length <= MAX_LENGTH:
            raise InvalidLength(
                f"Length must be between {MIN_LENGTH} and {MAX_LENGTH} characters.",
                {"length": self.length},
            )
        if not (self.include_upper or self.include_lower or self.include_digits or self.include_symbols):
            raise NoCategoriesEnabled("At least one character category must be enabled.")


def validate_options(options: GenerationOptions) -> None:
    options.validate()


def _categories(options: GenerationOptions) -> List[Tuple[str, str]]:
    # fixed order: the per-category seed draws follow it
    cats = []
    if options.include_upper:
        cats.append(("upper", UPPER))
    if options.include_lower:
        cats.append(("lower", LOWER))
    if options.include_digits:
        cats.append(("digits", DIGITS))
    if options.include_symbols:
        cats.append(("symbols", DEFAULT_SYMBOLS))
    return cats


def build_charsets(options: GenerationOptions) -> List[Tuple[str, str]]:
    """
    Return the enabled (name, charset) pairs with exclusions removed.
    Raises CategoryExhausted if any enabled category ends up empty.
    """
    excluded = set(options.exclude_chars)
    if options.avoid_ambiguous:
        excluded.update(AMBIGUOUS)

    charsets = []
    for name, chars in _categories(options):
        filtered = "".join(c for c in chars if c not in excluded)
        if not filtered:
            raise CategoryExhausted(name)
        charsets.append((name, filtered))
    return charsets


def _pick(chars: str) -> str:
    return chars[randbelow(len(chars))]


def secure_shuffle(items: List[Any]) -> None:
    """In-place Fisher-Yates shuffle driven by the OS CSPRNG."""
    for i in range(len(items) - 1, 0, -1):
        j = randbelow(i + 1)
        items[i], items[j] = items[j], items[i]


def generate(options: GenerationOptions) -> str:
    """
    Generate a cryptographically secure password.
    """
    options.validate()
    charsets = build_charsets(options)
    pool = "".join(chars for _, chars in charsets)

    password_chars = []
    if options.require_each_category:
        for _, chars in charsets:
            password_chars.append(_pick(chars))

    for _ in range(options.length - len(password_chars)):
        password_chars.append(_pick(pool))

    secure_shuffle(password_chars)
    return "".join(password_chars)


def generate_multiple(count: int, options: GenerationOptions) -> List[str]:
    if not 1 <= count <= MAX_COUNT:
        raise InvalidCount(f"Count must be between 1 and {MAX_COUNT}.", {"count": count})
    return [generate(options) for _ in range(count)]
