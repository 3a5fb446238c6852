"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class LoginRequest:
    """Raw credentials exactly as the caller supplied them.

    Values are left untyped on purpose: the validator is responsible for
    rejecting missing or non-string inputs.
    """

    email: Any
    password: Any
