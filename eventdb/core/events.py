import logging
from datetime import datetime, timezone
from operator import attrgetter

from pymongo.errors import DuplicateKeyError

from eventdb.config import EVENTS_COLLECTION
from eventdb.utils.errors import NormalizationError, RecordError, RecordValidationError
from eventdb.utils.normalize import normalize_date, normalize_time, slugify
from eventdb.utils.schema import EventModel, require_object_id, to_object_id

REQUIRED_STRING_FIELDS = [
    (name, attrgetter(name))
    for name in (
        "title",
        "description",
        "overview",
        "image",
        "venue",
        "location",
        "date",
        "time",
        "mode",
        "audience",
        "organizer",
    )
]

REQUIRED_LIST_FIELDS = [
    ("agenda", attrgetter("agenda"), "Agenda must contain at least one item."),
    ("tags", attrgetter("tags"), "Tags must contain at least one item."),
]


def validate_event(event: EventModel) -> None:
    for name, get in REQUIRED_STRING_FIELDS:
        value = get(event)
        if not isinstance(value, str) or not value.strip():
            raise RecordValidationError(f'Field "{name}" is required and cannot be empty.', field=name)

    for name, get, message in REQUIRED_LIST_FIELDS:
        value = get(event)
        if not isinstance(value, list) or not value:
            raise RecordValidationError(message, field=name)


def prepare_event(event: EventModel, previous: EventModel | None = None) -> EventModel:
    """Validates an event and returns a normalized copy ready to be written.

    ``previous`` is the stored version of the same event; slug, date and time
    are recomputed only when it is None or the source field differs from it.
    The input model is left untouched.
    """
    validate_event(event)
    is_new = previous is None
    updates = {}

    if is_new or event.title != previous.title:
        slug = slugify(event.title)
        if not slug:
            raise RecordValidationError(
                f'Field "slug" could not be derived from title "{event.title}".', field="slug"
            )
        updates["slug"] = slug
    else:
        updates["slug"] = previous.slug

    if is_new or event.date != previous.date:
        date = normalize_date(event.date)
        if date is None:
            raise NormalizationError("Invalid date format. Expected a valid date string.", field="date")
        updates["date"] = date

    if is_new or event.time != previous.time:
        time = normalize_time(event.time)
        if time is None:
            raise NormalizationError(
                'Invalid time format. Expected a valid time (e.g., "13:30" or "1:30 pm").', field="time"
            )
        updates["time"] = time

    return event.model_copy(update=updates)


class EventRepository:
    def __init__(self, db):
        self.collection = db[EVENTS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index("slug", unique=True)

    async def create(self, attrs: dict) -> EventModel:
        return await self.save(EventModel.build(attrs))

    async def save(self, event: EventModel) -> EventModel:
        try:
            oid = require_object_id(event.id)
            previous = await self.get(oid) if oid is not None else None
            prepared = prepare_event(event, previous)
        except RecordError as e:
            logging.warning(f"Rejected event '{event.title}': {e.message}")
            raise

        now = datetime.now(timezone.utc)
        try:
            if previous is None:
                prepared = prepared.model_copy(update={"created_at": now, "updated_at": now})
                doc = prepared.to_document()
                if oid is not None:
                    doc["_id"] = oid
                result = await self.collection.insert_one(doc)
                prepared = prepared.model_copy(update={"id": str(result.inserted_id)})
                logging.info(f"Event '{prepared.title}' created with slug '{prepared.slug}'")
            else:
                prepared = prepared.model_copy(update={"created_at": previous.created_at, "updated_at": now})
                await self.collection.replace_one({"_id": oid}, prepared.to_document())
                logging.info(f"Event '{prepared.slug}' updated")
        except DuplicateKeyError as e:
            raise RecordValidationError(
                f'An event with slug "{prepared.slug}" already exists.', field="slug"
            ) from e

        return prepared

    async def get(self, event_id) -> EventModel | None:
        oid = to_object_id(event_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return EventModel.model_validate(doc) if doc else None

    async def get_by_slug(self, slug: str) -> EventModel | None:
        doc = await self.collection.find_one({"slug": slug})
        return EventModel.model_validate(doc) if doc else None

    async def list_events(self, limit: int | None = None) -> list[EventModel]:
        cursor = self.collection.find({}).sort("createdAt", -1)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
        return [EventModel.model_validate(doc) for doc in docs]

    async def exists(self, event_id) -> bool:
        oid = to_object_id(event_id)
        if oid is None:
            return False
        return await self.collection.find_one({"_id": oid}, projection={"_id": 1}) is not None
