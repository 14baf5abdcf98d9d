"""
Catalog failure kinds.
"""

from typing import Dict, Optional

from shared.errors import ConflictError, ValidationError as BaseValidationError


class ValidationError(BaseValidationError):
    """One or more fields violate their constraints.

    ``messages`` maps every offending field to its message.
    """

    def __init__(self, messages: Dict[str, str]):
        self.messages = dict(messages)
        super().__init__("Invalid book", details=self.messages, code="VALIDATION_ERROR")


class TitelExistsError(BaseValidationError):
    """Another book already has the title."""

    def __init__(self, title: str, existing_id: Optional[str] = None):
        self.title = title
        details = {"title": title}
        if existing_id is not None:
            details["id"] = existing_id
        super().__init__(f'The title "{title}" already exists.', details=details, code="TITLE_EXISTS")


class VersionMissing(BaseValidationError):
    """An update came without a version."""

    status_code = 428

    def __init__(self):
        super().__init__("The version number is missing.", code="VERSION_MISSING")


class VersionInvalid(BaseValidationError):
    """The supplied version is not a non-negative integer."""

    def __init__(self, version: str):
        super().__init__("The version number is invalid.", details={"version": version}, code="VERSION_INVALID")


class VersionInvalidError(ConflictError):
    """No book with the id and at least the supplied version exists."""

    def __init__(self, buch_id: Optional[str], version: int):
        super().__init__(
            f"There is no book with id {buch_id} and version {version}.",
            details={"id": buch_id, "version": version},
            code="VERSION_CONFLICT",
        )
