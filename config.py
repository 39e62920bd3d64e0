"""Front-end configuration.

Holds the settings the lexer and parser consult: the declaration-keyword
table (`let` and `var` by default), the name of the entry function, and
whether to stop at the first error. Settings can be overridden via
environment variables or explicit construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

from primitives import PrimitiveType
from tokens import KEYWORDS


DEFAULT_DECLARATION_KEYWORDS = ("let", "var")
DEFAULT_ENTRY_FUNCTION = "main"

_TRUTHY = {"1", "true", "yes", "on"}


def _is_identifier(word: str) -> bool:
    return bool(word) and (word[0].isalpha() or word[0] == "_") and all(
        c.isalnum() or c == "_" for c in word
    )


@dataclass(frozen=True)
class FrontendConfig:
    """Settings shared by `Lexer` and `Parser`."""

    declaration_keywords: Tuple[str, ...] = DEFAULT_DECLARATION_KEYWORDS
    entry_function: str = DEFAULT_ENTRY_FUNCTION
    fail_fast: bool = False

    def __post_init__(self) -> None:
        if not self.declaration_keywords:
            raise ValueError("at least one declaration keyword is required")
        for word in self.declaration_keywords:
            if not _is_identifier(word):
                raise ValueError(f"declaration keyword {word!r} is not an identifier")
            if word in KEYWORDS or PrimitiveType.from_name(word) is not None:
                raise ValueError(f"declaration keyword {word!r} is already reserved")
        if not _is_identifier(self.entry_function):
            raise ValueError(f"entry function {self.entry_function!r} is not an identifier")

    @classmethod
    def from_env(cls) -> FrontendConfig:
        """Build config from environment variables, falling back to defaults."""
        kwargs = {}
        if val := os.environ.get("WADDLE_DECL_KEYWORDS"):
            kwargs["declaration_keywords"] = tuple(
                w.strip() for w in val.split(",") if w.strip()
            )
        if val := os.environ.get("WADDLE_ENTRY_FUNCTION"):
            kwargs["entry_function"] = val
        if val := os.environ.get("WADDLE_FAIL_FAST"):
            kwargs["fail_fast"] = val.strip().lower() in _TRUTHY
        return cls(**kwargs)


DEFAULT_CONFIG = FrontendConfig()
