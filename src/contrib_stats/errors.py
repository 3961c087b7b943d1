"""
Error kinds raised by the pipeline. Every one of them aborts the run.
"""
from __future__ import annotations


class ContribError(Exception):
    """Base for all contributors errors; carries a message and diagnostic context."""

    def __init__(self, message: str, details: dict | None = None, **context: object):
        self.message = message
        self.details = dict(details or {})
        self.details.update(context)
        super().__init__(message)

    def __str__(self) -> str:
        ctx = ", ".join(f"{k}={v}" for k, v in self.details.items() if v not in (None, ""))
        if not ctx:
            return self.message
        return f"{self.message} ({ctx})"


class ConfigError(ContribError):
    """Bad root path, config file, ignore file, glob pattern or output directory."""


class ClassifierError(ContribError):
    """The language classifier is missing, failed, or produced unusable output."""


class AttributionError(ContribError):
    """Line attribution failed for a specific file."""


class RepositoryError(ContribError):
    """The repository cannot be opened or the revision cannot be resolved."""
