"""
Catalog entry model and validation.
"""

import datetime as dt
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..service.exceptions import ValidationError

MAX_RATING = 5

_TITLE_PATTERN = re.compile(r"^\w.*")
_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(HttpUrl)


class Kind(str, Enum):
    """Edition of a book."""
    KINDLE = "KINDLE"
    PRINT = "PRINT"


class Publisher(str, Enum):
    """Known publishers."""
    PUBLISHER_A = "PUBLISHER_A"
    PUBLISHER_B = "PUBLISHER_B"


class Author(BaseModel):
    """Author of a book."""
    last_name: str
    first_name: Optional[str] = None


class Buch(BaseModel):
    """Catalog entry.

    Enumerations, ranges and formats are deliberately typed loosely here and
    checked by ``validate_buch`` so that all violations are reported at once.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    version: int = 0
    title: Optional[str] = None
    rating: Optional[int] = None
    kind: Optional[str] = None
    publisher: Optional[str] = None
    price: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    available: bool = False
    date: Optional[dt.date] = None
    email: Optional[str] = None
    homepage: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    authors: List[Author] = Field(default_factory=list)
    created: Optional[dt.datetime] = None
    updated: Optional[dt.datetime] = None

    @field_validator("keywords")
    @classmethod
    def _unique_keywords(cls, value: List[str]) -> List[str]:
        # Keywords form a set; keep first occurrence order
        return list(dict.fromkeys(value))

    def to_json(self) -> Dict[str, Any]:
        """JSON representation without the version, which travels as ETag."""
        return self.model_dump(mode="json", exclude={"version"})


class BuchQuery(BaseModel):
    """Search criteria; all given criteria must match."""

    title: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    kind: Optional[str] = None
    publisher: Optional[str] = None

    def matches(self, buch: Buch) -> bool:
        if self.title is not None and self.title.lower() not in (buch.title or "").lower():
            return False
        if any(keyword not in buch.keywords for keyword in self.keywords):
            return False
        if self.kind is not None and buch.kind != self.kind:
            return False
        if self.publisher is not None and buch.publisher != self.publisher:
            return False
        return True


def buch_from_payload(payload: Any, buch_id: Optional[str] = None) -> Buch:
    """Build a ``Buch`` from request JSON.

    Client supplied ``id`` and ``version`` are ignored; type errors are
    reported like any other field violation.
    """
    if not isinstance(payload, dict):
        raise ValidationError({"body": "A book must be a JSON object."})

    data = {key: value for key, value in payload.items() if key not in ("id", "version", "created", "updated")}
    try:
        buch = Buch.model_validate(data)
    except PydanticValidationError as exc:
        messages = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "body"
            messages.setdefault(field, error["msg"])
        raise ValidationError(messages) from None

    if buch_id is not None:
        buch.id = buch_id
    return buch


def _is_valid_uuid(value: Optional[str]) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def _is_valid(adapter: TypeAdapter, value: str) -> bool:
    try:
        adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def validate_buch(buch: Buch, max_rating: int = MAX_RATING, is_new: bool = True) -> Dict[str, str]:
    """Check field constraints and return every violation by field name.

    An empty mapping means the entry is valid.
    """
    errors: Dict[str, str] = {}

    if not is_new and not _is_valid_uuid(buch.id):
        errors["id"] = "The book has an invalid id."

    if not buch.title:
        errors["title"] = "A book must have a title."
    elif not _TITLE_PATTERN.match(buch.title):
        errors["title"] = "A title must start with a letter, a digit or _."

    if not buch.kind:
        errors["kind"] = "The kind of a book must be set."
    elif buch.kind not in Kind.__members__:
        errors["kind"] = "The kind of a book must be KINDLE or PRINT."

    if buch.rating is not None and not 0 <= buch.rating <= max_rating:
        errors["rating"] = f"{buch.rating} is not a valid rating."

    if not buch.publisher:
        errors["publisher"] = "The publisher of a book must be set."
    elif buch.publisher not in Publisher.__members__:
        errors["publisher"] = "The publisher of a book must be PUBLISHER_A or PUBLISHER_B."

    if buch.price is None:
        errors["price"] = "The price of a book must be set."
    elif buch.price < 0:
        errors["price"] = f"{buch.price} is not a valid price."

    if buch.email is not None and not _is_valid(_email_adapter, buch.email):
        errors["email"] = f"{buch.email} is not a valid email address."

    if buch.homepage is not None and not _is_valid(_url_adapter, buch.homepage):
        errors["homepage"] = f"{buch.homepage} is not a valid URL."

    return errors
