from __future__ import annotations

from enum import Enum


class ProviderErrorKind(str, Enum):
    HTTP_STATUS = "http_status"
    PARSE_FAILURE = "parse_failure"
    RATE_LIMITED = "rate_limited"
    EMPTY = "empty"


class ProviderError(Exception):
    """Raised by a provider client when a single fetch attempt cannot be used."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        provider: str,
        message: str = "",
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [f"{self.provider}: {self.kind.value}"]
        if self.status_code is not None:
            parts.append(f"({self.status_code})")
        if self.message:
            parts.append(f"- {self.message}")
        return " ".join(parts)

    @classmethod
    def from_status(cls, provider: str, status_code: int, message: str = "") -> ProviderError:
        if status_code == 429:
            return cls(ProviderErrorKind.RATE_LIMITED, provider, message, status_code)
        return cls(ProviderErrorKind.HTTP_STATUS, provider, message, status_code)
