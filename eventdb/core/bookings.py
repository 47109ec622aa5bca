import logging
import re
from datetime import datetime, timezone

from eventdb.config import BOOKINGS_COLLECTION, EVENTS_COLLECTION
from eventdb.utils.errors import RecordError, RecordValidationError, ReferentialError
from eventdb.utils.schema import BookingModel, require_object_id, to_object_id

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_booking(booking: BookingModel) -> None:
    if not booking.email or not EMAIL_RE.match(booking.email):
        raise RecordValidationError("A valid email address is required.", field="email")
    if not booking.event_id:
        raise RecordValidationError("eventId is required.", field="eventId")


async def prepare_booking(booking: BookingModel, events) -> BookingModel:
    """Validates a booking and checks that its event exists in ``events``.

    The existence check is a plain read before the write, so an event deleted
    in between still gets the booking.
    """
    validate_booking(booking)
    found = await events.find_one({"_id": to_object_id(booking.event_id)}, projection={"_id": 1})
    if found is None:
        raise ReferentialError("Referenced event does not exist.", field="eventId")
    return booking


class BookingRepository:
    def __init__(self, db):
        self.collection = db[BOOKINGS_COLLECTION]
        self.events = db[EVENTS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index("eventId")

    async def create(self, attrs: dict) -> BookingModel:
        return await self.save(BookingModel.build(attrs))

    async def save(self, booking: BookingModel) -> BookingModel:
        try:
            oid = require_object_id(booking.id)
            prepared = await prepare_booking(booking, self.events)
        except RecordError as e:
            logging.warning(f"Rejected booking for event {booking.event_id}: {e.message}")
            raise

        now = datetime.now(timezone.utc)
        stored = await self.collection.find_one({"_id": oid}) if oid is not None else None

        if stored is None:
            prepared = prepared.model_copy(update={"created_at": now, "updated_at": now})
            doc = prepared.to_document()
            if oid is not None:
                doc["_id"] = oid
            result = await self.collection.insert_one(doc)
            prepared = prepared.model_copy(update={"id": str(result.inserted_id)})
            logging.info(f"Booking {prepared.id} created for event {prepared.event_id}")
        else:
            prepared = prepared.model_copy(update={"created_at": stored.get("createdAt"), "updated_at": now})
            await self.collection.replace_one({"_id": oid}, prepared.to_document())
            logging.info(f"Booking {prepared.id} updated")

        return prepared

    async def list_for_event(self, event_id) -> list[BookingModel]:
        oid = to_object_id(event_id)
        if oid is None:
            return []
        docs = await self.collection.find({"eventId": oid}).sort("createdAt", -1).to_list(length=None)
        return [BookingModel.model_validate(doc) for doc in docs]

    async def count_for_event(self, event_id) -> int:
        oid = to_object_id(event_id)
        if oid is None:
            return 0
        return await self.collection.count_documents({"eventId": oid})
