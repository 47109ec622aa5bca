import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from eventdb.config import Settings, load_settings


class Database:
    """Owns one motor client and hands out its database handle.

    The first ``connect()`` opens the client and pings the server; callers
    that arrive while that is in flight await the same attempt, later callers
    get the cached handle. A failed attempt is not cached.
    """

    def __init__(self, uri: str, db_name: str | None = None, client_factory=AsyncIOMotorClient, **client_options):
        self.uri = uri
        self.db_name = db_name
        self.client_factory = client_factory
        self.client_options = client_options

        self._client = None
        self._db: AsyncIOMotorDatabase | None = None
        self._pending: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "Database":
        settings = settings or load_settings()
        return cls(settings.mongodb_uri, settings.mongodb_db, **kwargs)

    @property
    def connected(self) -> bool:
        return self._db is not None

    @property
    def client(self):
        return self._client

    async def connect(self) -> AsyncIOMotorDatabase:
        if self._db is not None:
            return self._db

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._open())

        pending = self._pending
        try:
            # shield: a cancelled waiter must not cancel the shared attempt
            db = await asyncio.shield(pending)
        except Exception:
            if self._pending is pending:
                self._pending = None
            raise

        self._db = db
        return db

    async def _open(self) -> AsyncIOMotorDatabase:
        logging.info(f"Connecting to MongoDB (database: {self.db_name})")
        client = self.client_factory(self.uri, **self.client_options)
        try:
            await client.admin.command("ping")
            db = client.get_default_database(self.db_name)
        except asyncio.CancelledError:
            logging.warning("MongoDB connection attempt cancelled")
            client.close()
            raise
        except Exception as e:
            logging.error(f"MongoDB connection failed: {e}")
            client.close()
            raise

        self._client = client
        logging.info(f"Connected to MongoDB database '{db.name}'")
        return db

    async def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        if self._client is not None:
            self._client.close()
            logging.info("MongoDB connection closed")
        self._client = None
        self._db = None
        self._pending = None


if __name__ == "__main__":

    async def ping():
        database = Database.from_settings()
        db = await database.connect()
        logging.info(f"Collections: {await db.list_collection_names()}")
        await database.close()

    asyncio.run(ping())
