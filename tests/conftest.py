import copy

import pytest
from fastapi.testclient import TestClient

from rentals.config import Settings
from rentals.main import create_app
from rentals.services.property_repository import PropertyRepository
from rentals.services.property_store import PropertyStore


AGENTS = {
    1: {"id": 1, "name": "John Mapfumo", "is_verified": True, "rating": "4.8", "properties_listed": 12},
    2: {"id": 2, "name": "Rudo Chikore", "is_verified": False, "rating": 4.1, "properties_listed": 3},
}

ROWS = [
    {
        "id": "p1",
        "title": "Garden Cottage",
        "location": "Borrowdale",
        "price": "650.00",
        "bedrooms": 2,
        "bathrooms": 1,
        "area": 80,
        "image_url": "http://img/p1.jpg",
        "description": "Quiet cottage",
        "amenities": ["wifi", "garden"],
        "agent_id": 1,
        "is_verified": True,
        "rating": "4.5",
        "reviews_count": 10,
        "has_virtual_tour": True,
        "is_featured": False,
    },
    {
        "id": "p2",
        "title": "City Studio",
        "location": "Avondale",
        "price": 300,
        "bedrooms": 1,
        "bathrooms": 1,
        "area": 35,
        "image_url": None,
        "description": None,
        "amenities": None,
        "agent_id": 2,
        "is_verified": False,
        "rating": None,
        "reviews_count": None,
        "has_virtual_tour": None,
        "is_featured": True,
    },
    {
        "id": "p3",
        "title": "Orphan Flat",
        "location": "Mbare",
        "price": 150,
        "bedrooms": 1,
        "bathrooms": 1,
        "area": 30,
        "image_url": "",
        "description": "",
        "amenities": [],
        "agent_id": 99,
        "is_verified": False,
        "rating": 0,
        "reviews_count": 0,
        "has_virtual_tour": False,
        "is_featured": False,
    },
]


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Mimics the supabase-py / postgrest query builder chain."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.action = None
        self.payload = None
        self.columns = None
        self.filters = []

    def select(self, columns="*"):
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def update(self, patch):
        self.action = "update"
        self.payload = patch
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def _matches(self, row):
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        self.client.calls.append(
            {
                "table": self.table,
                "action": self.action,
                "payload": copy.deepcopy(self.payload),
                "columns": self.columns,
                "filters": list(self.filters),
            }
        )
        failure = self.client.failures.get(self.action)
        if failure is not None:
            raise failure

        if self.action == "select":
            data = []
            for row in self.client.rows:
                if not self._matches(row):
                    continue
                row = copy.deepcopy(row)
                agent = self.client.agents.get(row.get("agent_id"))
                row["agent"] = copy.deepcopy(agent) if agent else None
                data.append(row)
            return FakeResponse(data)

        if self.action == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("id", f"new-{self.client.next_id}")
            if self.client.on_insert is not None:
                self.client.on_insert(row)
            self.client.next_id += 1
            self.client.rows.append(row)
            return FakeResponse([copy.deepcopy(row)] if self.client.return_inserted else [])

        if self.action == "update":
            updated = []
            for row in self.client.rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self.action == "delete":
            removed = [row for row in self.client.rows if self._matches(row)]
            self.client.rows = [row for row in self.client.rows if not self._matches(row)]
            return FakeResponse(removed)

        raise AssertionError(f"unexpected action {self.action}")


class FakeSupabaseClient:
    def __init__(self, rows=None, agents=None):
        self.rows = copy.deepcopy(ROWS if rows is None else rows)
        self.agents = copy.deepcopy(AGENTS if agents is None else agents)
        self.calls = []
        self.failures = {}
        self.next_id = 1
        self.return_inserted = True
        self.on_insert = None

    def table(self, name):
        return FakeQuery(self, name)

    def actions(self):
        return [call["action"] for call in self.calls]


@pytest.fixture
def fake_client():
    return FakeSupabaseClient()


@pytest.fixture
def repository(fake_client):
    return PropertyRepository(fake_client, default_agent_id=1)


@pytest.fixture
def store(repository):
    return PropertyStore(repository)


@pytest.fixture
def loaded_store(store):
    assert store.start()
    return store


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, SUPABASE_URL="", SUPABASE_KEY="", DEBUG=True)


@pytest.fixture
def api_client(loaded_store, test_settings):
    app = create_app(settings=test_settings, store=loaded_store)
    return TestClient(app)


@pytest.fixture
def new_listing():
    return {
        "title": "Loft A",
        "location": "Harare",
        "price": 500,
        "bedrooms": 1,
        "bathrooms": 1,
        "area": 40,
        "image": "http://x/y.jpg",
        "description": "d",
        "amenities": ["wifi", "parking"],
    }
