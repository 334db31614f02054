"""Exception types raised by the floor generation pipeline.

Degenerate inputs (a partition too small to split, a leaf too small for a room,
a neighbor pair without a usable corridor) are *not* errors; the stages record
them in metrics and move on. Only the conditions below stop a run.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class GenerationError(Exception):
    """Base class for all floor generation failures."""


class ConfigError(GenerationError, ValueError):
    """A FloorConfig value is out of range or inconsistent with another."""


class ConnectivityError(GenerationError):
    """The floor has no room at all, or its rooms are still split into several
    components after selection and repair."""

    def __init__(self, message: str, components: Optional[List[List[int]]] = None):
        super().__init__(message)
        self.components = components or []


class InvariantViolation(GenerationError):
    """A finished layout failed a structural check (strict mode only)."""

    def __init__(self, message: str, issues: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.issues = issues or {}


class GenerationFailed(GenerationError):
    """Every attempt of a generation run failed."""

    def __init__(self, seed: int, attempts: int, last_error: Optional[Exception] = None):
        super().__init__(f"floor generation failed for seed {seed} after {attempts} attempt(s): {last_error}")
        self.seed = seed
        self.attempts = attempts
        self.last_error = last_error


__all__ = [
    "GenerationError",
    "ConfigError",
    "ConnectivityError",
    "InvariantViolation",
    "GenerationFailed",
]
