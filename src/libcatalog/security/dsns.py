"""DSN parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

REDACTED_VALUE = "***"

_SENSITIVE_QUERY_KEYS = ("password", "passwd", "pwd", "secret", "token", "api_key", "apikey")


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    path: str
    query: dict[str, str]

    def redacted(self) -> str:
        """
        Return the DSN with credentials redacted but structure preserved.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += f":{REDACTED_VALUE}"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query = {
            key: REDACTED_VALUE if is_sensitive_key(key) else value
            for key, value in self.query.items()
        }
        query_string = urlencode(query) if query else ""

        # Build manually so we retain the double slash prefix even when netloc is empty
        result = f"{self.driver}://"
        if netloc:
            result += netloc
        result += self.path or ""
        if query_string:
            result += f"?{query_string}"
        return result


def is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    return any(token in normalized for token in _SENSITIVE_QUERY_KEYS)


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        path=parsed.path or "",
        query=query,
    )
