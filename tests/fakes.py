"""In-memory stand-in for the parts of the Firestore client the services use."""

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

_EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)
_ticks = itertools.count(1)


def _next_update_time():
    return _EPOCH + timedelta(microseconds=next(_ticks))


def _apply(existing, data):
    """Merge `data` into `existing`, resolving Increment transforms."""
    result = dict(existing)
    for key, value in data.items():
        if isinstance(value, firestore.Increment):
            result[key] = result.get(key, 0) + value.value
        else:
            result[key] = copy.deepcopy(value)
    return result


_OPERATORS = {
    "==": lambda field, value: field == value,
    "!=": lambda field, value: field != value,
    "<": lambda field, value: field < value,
    "<=": lambda field, value: field <= value,
    ">": lambda field, value: field > value,
    ">=": lambda field, value: field >= value,
    "in": lambda field, value: field in value,
    "array_contains": lambda field, value: value in field,
}


class FakeSnapshot:
    def __init__(self, reference, data, update_time):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)
        self.update_time = update_time

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self._collection.docs

    def get(self):
        data, update_time = self._docs.get(self.id, (None, None))
        return FakeSnapshot(self, data, update_time)

    def set(self, data, merge=False):
        existing = self._docs.get(self.id, ({}, None))[0] if merge else {}
        self._docs[self.id] = (_apply(existing, data), _next_update_time())

    def create(self, data):
        if self.id in self._docs:
            raise google_exceptions.AlreadyExists(f"Document already exists: {self.id}")
        self.set(data)

    def update(self, data, option=None):
        self._collection.client.run_interference(self._collection.name, self.id)

        if self.id not in self._docs:
            raise google_exceptions.NotFound(f"No document to update: {self.id}")

        existing, update_time = self._docs[self.id]
        if option is not None and option.get("last_update_time") != update_time:
            raise google_exceptions.FailedPrecondition("Document was modified concurrently")

        self._docs[self.id] = (_apply(existing, data), _next_update_time())

    def delete(self):
        self._docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), orders=(), limit_to=None):
        self._collection = collection
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit_to

    def where(self, field, op, value):
        return FakeQuery(self._collection, self._filters + ((field, op, value),), self._orders, self._limit)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self._collection, self._filters, self._orders + ((field, direction),), self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, self._orders, count)

    def _matches(self, data):
        for field, op, value in self._filters:
            if field not in data or not _OPERATORS[op](data[field], value):
                return False
        return True

    def stream(self):
        self._collection.client.last_query = {
            "collection": self._collection.name,
            "filters": self._filters,
            "orders": self._orders,
            "limit": self._limit,
        }
        snapshots = [
            FakeSnapshot(self._collection.document(doc_id), data, update_time)
            for doc_id, (data, update_time) in self._collection.docs.items()
            if self._matches(data)
        ]
        for field, direction in reversed(self._orders):
            snapshots.sort(key=lambda snap: snap.to_dict()[field], reverse=direction == "DESCENDING")
        if self._limit is not None:
            snapshots = snapshots[:self._limit]
        return iter(snapshots)

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.docs = {}
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentReference(self, doc_id or uuid.uuid4().hex)

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self.docs[ref.id][1], ref


class FakeBatch:
    def __init__(self):
        self._operations = []

    def delete(self, reference):
        self._operations.append(reference.delete)

    def set(self, reference, data, merge=False):
        self._operations.append(lambda: reference.set(data, merge=merge))

    def commit(self):
        for operation in self._operations:
            operation()
        self._operations = []


class FakeFirestore:
    def __init__(self):
        self._collections = {}
        self._interference = {}
        self.last_query = None

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    def batch(self):
        return FakeBatch()

    def write_option(self, **kwargs):
        return kwargs

    def interfere_once(self, collection, doc_id, action):
        """Run `action` just before the next update of a document, as a racing writer would."""
        self._interference[(collection, doc_id)] = action

    def run_interference(self, collection, doc_id):
        action = self._interference.pop((collection, doc_id), None)
        if action is not None:
            action()

    def documents(self, collection):
        """Plain dict view of a collection for assertions."""
        return {doc_id: copy.deepcopy(data) for doc_id, (data, _) in self.collection(collection).docs.items()}


UTC = ZoneInfo("UTC")
USER_ID = "reader-1"
OTHER_USER_ID = "reader-2"


def at(year, month, day, hour=12, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


NOW = at(2026, 10, 17, 15, 30)


def seed_book(db, book_id, **fields):
    data = {"title": f"Title of {book_id}", "author": "A. Writer"}
    data.update(fields)
    db.collection("books").document(book_id).set(data)
