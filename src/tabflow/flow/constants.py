"""Flow graph constants."""

from __future__ import annotations

# Kinds that mark pipeline boundaries and never become operations
STRUCTURAL_KINDS: frozenset[str] = frozenset({"start", "end"})

# Kind of the unique entry node
START_KIND: str = "start"

# Filter comparison modes understood by the engine
FILTER_MODES: tuple[str, ...] = (
    "equal",
    "not_equal",
    "contains",
    "not_contains",
    "starts_with",
    "not_starts_with",
    "ends_with",
    "not_ends_with",
    "is_null",
    "is_not_null",
    "gt",
    "ge",
    "lt",
    "le",
    "between",
)

# Filter combination logic; anything else is treated as "or"
FILTER_LOGICS: tuple[str, ...] = ("and", "or")
DEFAULT_FILTER_LOGIC: str = "or"

# String modes that rewrite a column in place instead of adding one
IN_PLACE_STR_MODES: frozenset[str] = frozenset(
    {
        "fill",
        "f_fill",
        "lower",
        "upper",
        "trim",
        "ltrim",
        "rtrim",
        "squeeze",
        "strip",
        "replace",
        "regex_replace",
        "round",
        "reverse",
        "abs",
        "neg",
        "normalize",
    }
)

# Separator for multi-value parameters (select columns, filter values)
VALUE_SEPARATOR: str = "|"
