from datetime import datetime

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from eventdb.utils.errors import RecordValidationError
from eventdb.utils.normalize import normalize_email

TRIMMED_EVENT_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "mode",
    "audience",
    "organizer",
)


class DocumentModel(BaseModel):
    """Common shape of a stored document: ``_id`` plus timestamps."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="_id")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @classmethod
    def build(cls, attrs: dict):
        """Builds a model from caller attributes, raising RecordValidationError on bad input."""
        try:
            return cls.model_validate(attrs)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else None
            raise RecordValidationError(f'Field "{field}": {error["msg"]}', field=field) from e

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})


class EventModel(DocumentModel):
    title: str = ""
    slug: str | None = None
    description: str = ""
    overview: str = ""
    image: str = ""
    venue: str = ""
    location: str = ""
    date: str = ""
    time: str = ""
    mode: str = ""
    audience: str = ""
    agenda: list[str] = Field(default_factory=list)
    organizer: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator(*TRIMMED_EVENT_FIELDS, mode="before")
    @classmethod
    def trim_strings(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class BookingModel(DocumentModel):
    event_id: str | None = Field(default=None, alias="eventId")
    email: str = ""

    @field_validator("event_id", mode="before")
    @classmethod
    def event_id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, str):
            value = value.strip()
            if value and not ObjectId.is_valid(value):
                raise ValueError("eventId is not a valid identifier")
            return value or None
        return value

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        if isinstance(value, str):
            return normalize_email(value)
        return value

    def to_document(self) -> dict:
        doc = super().to_document()
        if self.event_id is not None:
            doc["eventId"] = ObjectId(self.event_id)
        return doc


def to_object_id(value) -> ObjectId | None:
    """Returns value as an ObjectId, or None if it is not a valid identifier."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def require_object_id(value) -> ObjectId | None:
    """Like to_object_id, but a present value that is not an identifier is an error."""
    if value is None:
        return None
    oid = to_object_id(value)
    if oid is None:
        raise RecordValidationError(f'Field "_id": {value!r} is not a valid identifier.', field="_id")
    return oid
