"""
Property Repository
The only component allowed to call the Supabase client. Reads join the
``properties`` table with ``agents``; writes go through the schema mapper.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from rentals.exceptions import NotFoundError, StoreReadError, StoreWriteError
from rentals.schemas.property import Property, PropertyCreate, PropertyUpdate
from rentals.services.schema_mapper import (
    AGENT_COLUMNS,
    to_application,
    to_storage,
    to_storage_insert,
)

logger = logging.getLogger(__name__)

# PostgREST rejections and transport failures
STORE_ERRORS = (APIError, httpx.HTTPError)


def _store_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


class PropertyRepository:
    def __init__(
        self,
        client: Client,
        default_agent_id: int = 1,
        properties_table: str = "properties",
        agents_table: str = "agents",
    ):
        self.client = client
        self.default_agent_id = default_agent_id
        self.properties_table = properties_table
        self.select_clause = f"*, agent:{agents_table}({AGENT_COLUMNS})"

    def _table(self):
        return self.client.table(self.properties_table)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def fetch_all_with_agents(self) -> List[Property]:
        """
        Fetch every listing with its agent joined in.

        Raises:
            StoreReadError: the select failed
        """
        try:
            response = self._table().select(self.select_clause).execute()
        except STORE_ERRORS as e:
            logger.error(f"Supabase fetch error: {e}")
            raise StoreReadError("fetch properties", _store_message(e)) from e

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} properties")
        return [to_application(row) for row in rows]

    # ── Writes ────────────────────────────────────────────────────────────────

    def create(self, payload: Union[PropertyCreate, Mapping[str, Any]]) -> Property:
        """
        Insert a listing and return it with its agent joined.

        The insert response carries the new row id, which is looked up in a
        full refetch since inserts do not return the agent embed. Without an
        id the row is matched on (title, location, price), then the last row.

        Raises:
            StoreWriteError: the insert failed
            StoreReadError: the follow-up fetch failed
            NotFoundError: the store returned no rows after the insert
        """
        row = to_storage_insert(payload, self.default_agent_id)

        try:
            response = self._table().insert(row).execute()
        except STORE_ERRORS as e:
            logger.error(f"Supabase insert error: {e}")
            raise StoreWriteError("create property", _store_message(e)) from e

        new_id = self._inserted_id(response.data)
        logger.info(f"Inserted property {new_id or '(no id returned)'}: {row['title']}")

        properties = self.fetch_all_with_agents()
        if not properties:
            raise NotFoundError(new_id, "Created property not found after insert")

        if new_id is not None:
            for prop in properties:
                if prop.id == new_id:
                    return prop

        logger.warning(
            f"Could not locate inserted property by id ({new_id}); "
            "matching on title, location and price"
        )
        for prop in properties:
            if (
                prop.title == row["title"]
                and prop.location == row["location"]
                and prop.price == float(row["price"])
            ):
                return prop
        return properties[-1]

    def update_by_id(
        self,
        property_id: str,
        payload: Union[PropertyUpdate, Mapping[str, Any]],
    ) -> Property:
        """
        Apply the fields present in ``payload`` to one listing.

        Raises:
            StoreWriteError: the update failed
            StoreReadError: the follow-up fetch failed
            NotFoundError: no listing with that id after the update
        """
        patch = to_storage(payload)
        patch.pop("id", None)

        if patch:
            try:
                self._table().update(patch).eq("id", property_id).execute()
            except STORE_ERRORS as e:
                logger.error(f"Supabase update error: {e}")
                raise StoreWriteError("update property", _store_message(e)) from e
            logger.info(f"Updated property {property_id}: {sorted(patch)}")
        else:
            logger.debug(f"Empty update for property {property_id}, refetching only")

        for prop in self.fetch_all_with_agents():
            if prop.id == property_id:
                return prop
        raise NotFoundError(property_id, "Updated property not found")

    def delete_by_id(self, property_id: str) -> None:
        """
        Delete one listing.

        Raises:
            StoreWriteError: the delete failed
        """
        try:
            self._table().delete().eq("id", property_id).execute()
        except STORE_ERRORS as e:
            logger.error(f"Supabase delete error: {e}")
            raise StoreWriteError("delete property", _store_message(e)) from e
        logger.info(f"Deleted property {property_id}")

    @staticmethod
    def _inserted_id(data: Any) -> Optional[str]:
        if isinstance(data, list):
            data = data[0] if data else None
        if not data or data.get("id") is None:
            return None
        return str(data["id"])
