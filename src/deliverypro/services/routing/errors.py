"""Run-level failures surfaced to callers of the routing service."""

from __future__ import annotations


class InputError(ValueError):
    """The delivery list cannot be optimized as supplied and must be corrected."""
