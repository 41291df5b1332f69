"""
Property Store
Session-lifetime state for the listings client: the current collection,
a loading flag, the last error and the locally saved ids.

Only this class mutates its own state. Every remote operation delegates
to the PropertyRepository and then reconciles the local list by splicing
the returned entity in place; a full refresh is used when the created
entity cannot be placed unambiguously. Splices happen in place under a
lock, since FastAPI runs the sync routes on a threadpool. Failures are
caught here, kept in ``error`` and reported through the return value.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from rentals.exceptions import ConfigurationError
from rentals.schemas.property import Property, PropertyCreate, PropertyUpdate
from rentals.services.property_repository import PropertyRepository

logger = logging.getLogger(__name__)


class PropertyStore:
    def __init__(
        self,
        repository: Optional[PropertyRepository],
        error: Optional[Exception] = None,
    ):
        self.repository = repository
        self.properties: List[Property] = []
        self.saved_ids: Set[str] = set()
        self.is_loading: bool = False
        self.error: Optional[Exception] = error
        self._started = False
        self._start_result = False
        self._lock = threading.RLock()

        # Kept apart from `error` so refresh() cannot clear the cause
        self._unavailable: Optional[Exception] = None
        if repository is None:
            self._unavailable = error or ConfigurationError("Property store is not configured")
            self.error = self._unavailable

    def _repo(self) -> PropertyRepository:
        if self.repository is None:
            raise self._unavailable
        return self.repository

    def _fail(self, action: str, exc: Exception) -> None:
        logger.error(f"Failed to {action}: {exc}")
        self.error = exc

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> bool:
        """Initial load; runs refresh() once per store instance."""
        if not self._started:
            self._started = True
            self._start_result = self.refresh()
        return self._start_result

    def refresh(self) -> bool:
        """
        Replace the local collection with the store's contents.

        On failure the previous collection is kept and ``error`` is set.
        """
        self.is_loading = True
        self.error = None
        try:
            fetched = self._repo().fetch_all_with_agents()
            with self._lock:
                self.properties[:] = fetched
            logger.info(f"Loaded {len(self.properties)} properties")
            return True
        except Exception as e:
            self._fail("refresh properties", e)
            return False
        finally:
            self.is_loading = False

    # ── Remote operations ─────────────────────────────────────────────────────

    def add(
        self, payload: Union[PropertyCreate, Mapping[str, Any]]
    ) -> Optional[Property]:
        """Create a listing; returns it, or None on failure."""
        try:
            created = self._repo().create(payload)
        except Exception as e:
            self._fail("add property", e)
            return None

        with self._lock:
            known = self._index_of(created.id) is not None
            if not known:
                self.properties.append(created)
        if known:
            # The repository matched an existing row; resync instead of guessing
            logger.warning(f"Created property {created.id} already held locally, refreshing")
            self.refresh()
        return created

    def update(
        self,
        property_id: str,
        payload: Union[PropertyUpdate, Mapping[str, Any]],
    ) -> Optional[Property]:
        """Apply a partial update; returns the stored listing, or None on failure."""
        try:
            updated = self._repo().update_by_id(property_id, payload)
        except Exception as e:
            self._fail(f"update property {property_id}", e)
            return None

        with self._lock:
            index = self._index_of(property_id)
            if index is None:
                self.properties.append(updated)
            else:
                self.properties[index] = updated
        return updated

    def remove(self, property_id: str) -> bool:
        """Delete a listing and drop it from the local collection."""
        try:
            self._repo().delete_by_id(property_id)
        except Exception as e:
            self._fail(f"delete property {property_id}", e)
            return False

        with self._lock:
            self.properties[:] = [p for p in self.properties if p.id != property_id]
            self.saved_ids.discard(property_id)
        return True

    # ── Local operations ──────────────────────────────────────────────────────

    def get_by_id(self, property_id: str) -> Optional[Property]:
        index = self._index_of(property_id)
        return None if index is None else self.properties[index]

    def toggle_saved(self, property_id: str) -> bool:
        """Flip the saved mark; returns whether the id is now saved."""
        with self._lock:
            if property_id in self.saved_ids:
                self.saved_ids.discard(property_id)
                return False
            self.saved_ids.add(property_id)
            return True

    def is_saved(self, property_id: str) -> bool:
        return property_id in self.saved_ids

    def saved_properties(self) -> List[Property]:
        return [p for p in self.properties if p.id in self.saved_ids]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "is_loading": self.is_loading,
            "error": str(self.error) if self.error else None,
            "total": len(self.properties),
            "saved": len(self.saved_ids),
        }

    def _index_of(self, property_id: str) -> Optional[int]:
        for index, prop in enumerate(self.properties):
            if prop.id == property_id:
                return index
        return None
