from __future__ import annotations


class MatchError(RuntimeError):
    """Base class for reference matching errors."""


class MatchConfigError(MatchError, ValueError):
    """Invalid request parameters or input; raised before any matching starts."""
