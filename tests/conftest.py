import asyncio

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError


class FakeResult:
    def __init__(self, inserted_id=None):
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction=1):
        self.docs = sorted(self.docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return [dict(d) for d in self.docs]


class FakeCollection:
    """In-memory stand-in for the part of motor's collection API we use."""

    def __init__(self, name):
        self.name = name
        self.docs = []
        self.indexes = []
        self.unique_keys = set()

    def _matches(self, doc, query):
        return all(doc.get(k) == v for k, v in query.items())

    def _check_unique(self, doc, ignore_id=None):
        for key in self.unique_keys:
            for other in self.docs:
                if other["_id"] != ignore_id and other.get(key) == doc.get(key):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {key}")

    async def create_index(self, key, unique=False):
        self.indexes.append((key, unique))
        if unique:
            self.unique_keys.add(key)
        return f"{key}_1"

    async def insert_one(self, doc):
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return FakeResult(doc["_id"])

    async def replace_one(self, query, doc):
        for i, existing in enumerate(self.docs):
            if self._matches(existing, query):
                new = dict(doc, _id=existing["_id"])
                self._check_unique(new, ignore_id=existing["_id"])
                self.docs[i] = new
                return FakeResult()
        return FakeResult()

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if self._matches(doc, query):
                return dict(doc)
        return None

    def find(self, query):
        return FakeCursor([d for d in self.docs if self._matches(d, query)])

    async def count_documents(self, query):
        return len([d for d in self.docs if self._matches(d, query)])


class FakeDatabase:
    def __init__(self, name="eventdb"):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection(name))


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    async def command(self, name):
        self.client.pings += 1
        await asyncio.sleep(0.01)
        if self.client.fail:
            raise ConnectionError("server unavailable")
        return {"ok": 1}


class FakeClientFactory:
    """Client factory that records every client it builds."""

    def __init__(self, fail=False):
        self.fail = fail
        self.clients = []

    def __call__(self, uri, **options):
        client = FakeClient(uri, options, fail=self.fail)
        self.clients.append(client)
        return client


class FakeClient:
    def __init__(self, uri, options, fail=False):
        self.uri = uri
        self.options = options
        self.fail = fail
        self.pings = 0
        self.closed = False
        self.admin = FakeAdmin(self)

    def get_default_database(self, default=None):
        return FakeDatabase(default)

    def close(self):
        self.closed = True


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def event_attrs():
    return {
        "title": "PyCon Berlin 2025!",
        "description": "Three days of talks and sprints.",
        "overview": "The yearly Python conference.",
        "image": "/images/pycon.png",
        "venue": "bcc Berlin Congress Center",
        "location": "Berlin, Germany",
        "date": "2025-04-23",
        "time": "9:30 am",
        "mode": "offline",
        "audience": "Developers",
        "agenda": ["Keynote", "Talks", "Sprints"],
        "organizer": "Python Software Verband",
        "tags": ["python", "conference"],
    }


@pytest.fixture
def factory():
    return FakeClientFactory()
