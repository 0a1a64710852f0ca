"""Errors raised by the Vault client."""


class VaultError(Exception):
    """Base class for Vault client errors."""


class VaultConnectionError(VaultError):
    """The request never produced an HTTP response (DNS, TLS, timeout...)."""


class VaultAPIError(VaultError):
    """Vault answered with an error status."""

    def __init__(
        self,
        status_code: int,
        method: str,
        path: str,
        errors: list[str] | None = None,
    ):
        self.status_code = status_code
        self.method = method
        self.path = path
        self.errors = errors or []
        message = f"{method} {path}: HTTP {status_code}"
        if self.errors:
            message += ": " + "; ".join(self.errors)
        super().__init__(message)


class NotFoundError(VaultAPIError):
    """Vault reported that nothing exists at the requested path."""


class MalformedResponseError(VaultError):
    """A successful response is missing data or has data of the wrong shape."""

    def __init__(self, field: str, record_id: str, reason: str):
        self.field = field
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"field {field!r} of {record_id!r}: {reason}")
