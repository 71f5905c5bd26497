"""Security helpers (DSN parsing and credential redaction)."""

from .dsns import DSNConfig, parse_dsn

__all__ = ["DSNConfig", "parse_dsn"]
