import httpx
import pytest
from postgrest.exceptions import APIError

from rentals.exceptions import NotFoundError, StoreReadError, StoreWriteError
from rentals.schemas.property import EMPTY_AGENT, PropertyUpdate


def _api_error(message):
    return APIError({"message": message, "code": "42501", "hint": None, "details": None})


def test_fetch_all_joins_agents(repository, fake_client):
    properties = repository.fetch_all_with_agents()

    assert [p.id for p in properties] == ["p1", "p2", "p3"]
    assert properties[0].agent.name == "John Mapfumo"
    assert properties[2].agent == EMPTY_AGENT

    call = fake_client.calls[0]
    assert call["table"] == "properties"
    assert call["columns"] == "*, agent:agents(id, name, is_verified, rating, properties_listed)"


def test_fetch_all_wraps_store_error(repository, fake_client):
    fake_client.failures["select"] = _api_error("permission denied for table properties")

    with pytest.raises(StoreReadError) as exc_info:
        repository.fetch_all_with_agents()

    assert "permission denied" in str(exc_info.value)
    assert exc_info.value.operation == "fetch properties"
    assert isinstance(exc_info.value.__cause__, APIError)


def test_fetch_all_wraps_transport_error(repository, fake_client):
    fake_client.failures["select"] = httpx.ConnectError("connection refused")

    with pytest.raises(StoreReadError):
        repository.fetch_all_with_agents()


def test_create_returns_row_with_agent(repository, fake_client, new_listing):
    created = repository.create(new_listing)

    assert created.id == "new-1"
    assert created.title == "Loft A"
    assert created.amenities == ["wifi", "parking"]
    assert created.agent.id == 1
    assert fake_client.actions() == ["insert", "select"]
    assert fake_client.calls[0]["payload"]["image_url"] == "http://x/y.jpg"
    assert fake_client.calls[0]["payload"]["agent_id"] == 1


def test_create_prefers_inserted_id_over_field_match(repository, fake_client, new_listing):
    first = repository.create(new_listing)
    second = repository.create(new_listing)

    assert first.id != second.id
    assert second.id == "new-2"


def test_create_without_returned_row_matches_fields(repository, fake_client, new_listing):
    fake_client.return_inserted = False

    created = repository.create(new_listing)

    assert created.title == "Loft A"
    assert created.location == "Harare"
    assert created.price == 500


def test_create_falls_back_to_last_row(repository, fake_client, new_listing):
    fake_client.return_inserted = False
    # The store rewrites the title, so neither id nor fields can be matched
    fake_client.on_insert = lambda row: row.update(title=row["title"].upper())

    created = repository.create(new_listing)

    assert created.id == "new-1"
    assert created.title == "LOFT A"


def test_create_insert_failure(repository, fake_client, new_listing):
    fake_client.failures["insert"] = _api_error("violates foreign key constraint")

    with pytest.raises(StoreWriteError) as exc_info:
        repository.create(new_listing)

    assert "foreign key" in str(exc_info.value)
    assert fake_client.actions() == ["insert"]


def test_create_refetch_failure_propagates_read_error(repository, fake_client, new_listing):
    fake_client.failures["select"] = _api_error("timeout")

    with pytest.raises(StoreReadError):
        repository.create(new_listing)


def test_update_sends_only_present_fields(repository, fake_client):
    updated = repository.update_by_id("p2", PropertyUpdate(price=500))

    assert updated.id == "p2"
    assert updated.price == 500
    update_call = fake_client.calls[0]
    assert update_call["action"] == "update"
    assert update_call["payload"] == {"price": 500.0}
    assert update_call["filters"] == [("id", "p2")]


def test_update_never_patches_primary_key(repository, fake_client):
    repository.update_by_id("p1", {"id": "other", "title": "Renamed"})
    assert fake_client.calls[0]["payload"] == {"title": "Renamed"}


def test_empty_update_skips_write(repository, fake_client):
    prop = repository.update_by_id("p1", PropertyUpdate())

    assert prop.id == "p1"
    assert fake_client.actions() == ["select"]


def test_update_missing_row_raises_not_found(repository):
    with pytest.raises(NotFoundError) as exc_info:
        repository.update_by_id("missing", {"price": 1})
    assert exc_info.value.property_id == "missing"


def test_update_failure(repository, fake_client):
    fake_client.failures["update"] = _api_error("boom")
    with pytest.raises(StoreWriteError):
        repository.update_by_id("p1", {"price": 1})


def test_delete_by_id(repository, fake_client):
    repository.delete_by_id("p1")

    assert [row["id"] for row in fake_client.rows] == ["p2", "p3"]
    assert fake_client.actions() == ["delete"]


def test_delete_failure(repository, fake_client):
    fake_client.failures["delete"] = _api_error("boom")
    with pytest.raises(StoreWriteError):
        repository.delete_by_id("p1")
    assert len(fake_client.rows) == 3
