"""
Identifier validation and name transforms.

A page or feature name is supplied in kebab-case (``user-profile``) and
every generated symbol is derived from it:

- PascalCase: ``UserProfile`` (components, types)
- camelCase: ``userProfile`` (variables, functions)
- SCREAMING_SNAKE_CASE: ``USER_PROFILE`` (constants, env vars)
"""
import logging
import re
from dataclasses import dataclass, field

from dolphin.core.errors import ValidationError

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")
SEGMENT_PATTERN = re.compile(r"^[a-z0-9]+$")
MAX_NAME_LENGTH = 64

# JS/TS reserved words plus names that collide with generated structure
# (index.html entries, default exports, object internals).
RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "implements", "import", "in",
    "instanceof", "interface", "let", "new", "null", "package", "private",
    "protected", "public", "return", "static", "super", "switch", "this",
    "throw", "true", "try", "typeof", "var", "void", "while", "with",
    "yield", "await", "async", "undefined", "nan", "infinity",
    # structural
    "index", "constructor", "prototype", "main", "api", "src", "assets",
    "node-modules", "proto", "arguments", "eval",
})


# =============================================================================
# Transforms
# =============================================================================

def _segments(name: str) -> list[str]:
    segments = [s for s in name.split("-") if s]
    if not segments:
        raise ValidationError(f"Name '{name}' has no usable segments")
    for segment in segments:
        if not SEGMENT_PATTERN.match(segment):
            raise ValidationError(
                f"Name segment '{segment}' may only contain lowercase letters and digits"
            )
    return segments


def to_pascal_case(name: str) -> str:
    """``user-profile`` -> ``UserProfile``."""
    return "".join(s[0].upper() + s[1:] for s in _segments(name))


def to_camel_case(name: str) -> str:
    """``user-profile`` -> ``userProfile``."""
    first, *rest = _segments(name)
    return first.lower() + "".join(s[0].upper() + s[1:] for s in rest)


def to_screaming_snake_case(name: str) -> str:
    """``user-profile`` -> ``USER_PROFILE``. Call only on validated names."""
    return name.upper().replace("-", "_")


# =============================================================================
# Validation
# =============================================================================

@dataclass(frozen=True)
class Identifier:
    """A validated name and its derived forms (computed once)."""
    raw: str
    pascal: str = field(init=False)
    camel: str = field(init=False)
    screaming_snake: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "pascal", to_pascal_case(self.raw))
        object.__setattr__(self, "camel", to_camel_case(self.raw))
        object.__setattr__(self, "screaming_snake", to_screaming_snake_case(self.raw))

    @property
    def snake(self) -> str:
        """SQL-style name: ``user_profile``."""
        return self.screaming_snake.lower()

    def __str__(self) -> str:
        return self.raw


def validate_identifier(name: str) -> Identifier:
    """
    Validate a kebab-case name and return its derived forms.

    Checks run in order and the first failure raises ValidationError
    with a user-facing reason.
    """
    if name is None or name == "":
        raise ValidationError("Name must not be empty")
    if any(ch.isspace() for ch in name):
        raise ValidationError("Name must not contain whitespace")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be {MAX_NAME_LENGTH} characters or less")
    if not NAME_PATTERN.match(name):
        raise ValidationError(
            "Name must start with a letter and contain only lowercase letters, "
            "numbers, and hyphens"
        )
    if "--" in name:
        raise ValidationError("Name must not contain consecutive hyphens")
    if name.startswith("-") or name.endswith("-"):
        raise ValidationError("Name must not start or end with a hyphen")
    if name in RESERVED_WORDS:
        raise ValidationError(f"'{name}' is a reserved word and cannot be used as a name")

    # Surfaces any segment-level violation before generation starts
    to_pascal_case(name)
    to_camel_case(name)

    identifier = Identifier(name)
    logger.debug(
        f"identifier_validated raw={identifier.raw} pascal={identifier.pascal} "
        f"camel={identifier.camel}"
    )
    return identifier
