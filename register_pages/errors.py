"""Exception types raised while declaring and installing pages."""

from __future__ import annotations


class RegistrationError(ValueError):
    """Base class for page registration failures."""


class InvalidKeyError(RegistrationError):
    """Raised when a page key contains characters outside ``[a-z0-9_-]``."""

    def __init__(self, key: str) -> None:
        self.key = key
        msg = (
            f"Invalid page key: {key!r}. Keys must contain only lowercase "
            "letters, numbers, underscores, and hyphens."
        )
        super().__init__(msg)


class MissingRequiredFieldError(RegistrationError):
    """Raised when ``title`` or ``content`` is empty or absent."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")


class TemplateNotFoundError(RegistrationError):
    """Raised when a page references a template that was never added."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template {name!r} not found")


class NoBackupFoundError(RegistrationError):
    """Raised by restore when no backup snapshot has been persisted."""

    def __init__(self) -> None:
        super().__init__("No backup found to restore")


class ManifestError(RegistrationError):
    """Raised when a YAML page manifest is malformed."""


class ContentStoreError(RuntimeError):
    """Raised by content-store collaborators when a write fails."""


class _RecordError(RegistrationError):
    action = "write"

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Failed to {self.action} record for page {key!r}: {detail}")


class RecordCreateFailedError(_RecordError):
    """Raised when the content store rejects a new record."""

    action = "create"


class RecordUpdateFailedError(_RecordError):
    """Raised when the content store rejects an update to an existing record."""

    action = "update"


class RecordFetchFailedError(_RecordError):
    """Raised when a tracked record could not be looked up.

    The stored id is kept: the record may still exist.
    """

    action = "fetch"


__all__ = [
    "ContentStoreError",
    "InvalidKeyError",
    "ManifestError",
    "MissingRequiredFieldError",
    "NoBackupFoundError",
    "RecordCreateFailedError",
    "RecordFetchFailedError",
    "RecordUpdateFailedError",
    "RegistrationError",
    "TemplateNotFoundError",
]
