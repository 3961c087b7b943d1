"""Per-language, per-author line attribution reports for git repositories."""

__version__ = "0.1.0"
