"""Typed access to the per-visitor booking slots.

Pages never touch the session mapping directly. They go through a
``RecordSlot`` bound to a ``SessionStorage`` backend: database rows keyed by
a token in the session cookie in production, an in-memory dictionary in tests.
"""
from __future__ import annotations

import json
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Generic, MutableMapping, Protocol, TypeVar

from flask import current_app, session

from storefront.app.models import SessionItem
from storefront.extensions import db
from wellness.models.booking import BookingRecord, PaymentRecord

LOGGER = logging.getLogger(__name__)

BOOKING_KEY = "bookingData"
PAYMENT_KEY = "paymentData"
SESSION_TOKEN_KEY = "storefrontSession"


class SessionStorage(ABC):
    """String key/value storage scoped to one visitor session."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored string for ``key`` or ``None``."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""


class InMemoryStorage(SessionStorage):
    """Dictionary-backed storage used by tests and scripts."""

    def __init__(self, initial: MutableMapping[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class DatabaseSessionStorage(SessionStorage):
    """Storage kept in the ``session_items`` table.

    The signed session cookie only carries a random token naming the
    visitor's rows, so its size does not grow with questionnaire answers.
    A token is issued on the first write; issuing one also purges rows idle
    for longer than ``SESSION_ITEM_MAX_AGE_HOURS``.
    """

    def get_item(self, key: str) -> str | None:
        token = session.get(SESSION_TOKEN_KEY)
        if not token:
            return None
        item = SessionItem.query.filter_by(session_token=token, key=key).first()
        return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        token = self._token()
        item = SessionItem.query.filter_by(session_token=token, key=key).first()
        if item is None:
            item = SessionItem(session_token=token, key=key, value=value)
            db.session.add(item)
        else:
            item.value = value
        db.session.commit()

    def remove_item(self, key: str) -> None:
        token = session.get(SESSION_TOKEN_KEY)
        if not token:
            return
        SessionItem.query.filter_by(session_token=token, key=key).delete()
        db.session.commit()

    def _token(self) -> str:
        token = session.get(SESSION_TOKEN_KEY)
        if token:
            return token
        purge_idle_items(
            timedelta(hours=current_app.config.get("SESSION_ITEM_MAX_AGE_HOURS", 24))
        )
        token = secrets.token_urlsafe(32)
        session[SESSION_TOKEN_KEY] = token
        return token


def purge_idle_items(max_age: timedelta, now: datetime | None = None) -> int:
    """Delete stored items untouched for longer than ``max_age``."""

    cutoff = (now or datetime.utcnow()) - max_age
    removed = SessionItem.query.filter(SessionItem.updated_at < cutoff).delete()
    db.session.commit()
    if removed:
        LOGGER.info("Purged %s idle session items", removed)
    return removed


class _Record(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


RecordT = TypeVar("RecordT", bound=_Record)


class RecordSlot(Generic[RecordT]):
    """A single named record serialized as JSON inside a ``SessionStorage``."""

    def __init__(
        self,
        storage: SessionStorage,
        key: str,
        loader: Callable[[Any], RecordT],
    ) -> None:
        self._storage = storage
        self._key = key
        self._loader = loader

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> RecordT | None:
        """Return the stored record, or ``None`` when absent or unreadable."""

        raw = self._storage.get_item(self._key)
        if raw is None:
            return None
        try:
            return self._loader(json.loads(raw))
        except (ValueError, TypeError) as exc:
            LOGGER.error("Error parsing %s: %s", self._key, exc)
            return None

    def set(self, record: RecordT) -> None:
        """Overwrite the slot with ``record``."""

        self._storage.set_item(self._key, json.dumps(record.to_dict()))

    def clear(self) -> None:
        self._storage.remove_item(self._key)


def booking_slot(storage: SessionStorage) -> RecordSlot[BookingRecord]:
    return RecordSlot(storage, BOOKING_KEY, BookingRecord.from_dict)


def payment_slot(storage: SessionStorage) -> RecordSlot[PaymentRecord]:
    return RecordSlot(storage, PAYMENT_KEY, PaymentRecord.from_dict)


def current_storage() -> SessionStorage:
    """Return the storage backend configured on the running application."""

    factory: Callable[[], SessionStorage] = current_app.extensions["session_storage"]
    return factory()
