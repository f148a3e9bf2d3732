from __future__ import annotations

from http import HTTPStatus


class PlatformError(RuntimeError):
    pass


class Unauthorized(PlatformError):
    """The forwarded session is missing or has expired."""

    def __init__(self) -> None:
        super().__init__("unauthorized")


class ClientError(PlatformError):
    """A plain-text rejection from the platform, shown against a single field."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


ValidationErrors = dict[str, dict[str, str]]


class ValidationError(PlatformError):
    def __init__(self, message: str = "", errors: ValidationErrors | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: ValidationErrors = errors or {}


class StatusError(PlatformError):
    """Non-2xx response that carried no usable error body."""

    def __init__(self, code: int, method: str, url: str) -> None:
        self.code = code
        self.method = method
        self.url = url
        super().__init__(f"returned non-2XX response: {code} ({method} {url})")

    @property
    def title(self) -> str:
        try:
            return f"{self.code} {HTTPStatus(self.code).phrase}"
        except ValueError:
            return str(self.code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusError):
            return NotImplemented
        return (self.code, self.method, self.url) == (other.code, other.method, other.url)

    def __hash__(self) -> int:
        return hash((self.code, self.method, self.url))
