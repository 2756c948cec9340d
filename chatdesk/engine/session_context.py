"""Session context — resolves the current user once per view activation."""
from __future__ import annotations

import json
import logging
from typing import Any

from .errors import IdentityMissing
from chatdesk.shared.models.session import Session
from chatdesk.shared.services.identity_store import (
    PERSONA_RECORD,
    USER_RECORD,
    IdentityStore,
)

logger = logging.getLogger(__name__)


def _decode_record(raw: str, name: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise IdentityMissing(f"record '{name}' is not valid JSON ({exc.msg})") from exc
    if not isinstance(value, dict):
        raise IdentityMissing(f"record '{name}' is not an object")
    return value


class SessionContext:
    """Loads the identity records and keeps the resulting Session.

    ``load()`` touches the store only on its first call; later calls
    return the cached session (or re-raise the original failure) so a
    re-entrant activation has no extra side effects.
    """

    def __init__(self, store: IdentityStore) -> None:
        self._store = store
        self._load_count = 0
        self._session: Session | None = None
        self._failure: IdentityMissing | None = None

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def load_count(self) -> int:
        return self._load_count

    def load(self) -> Session:
        if self._session is not None:
            return self._session
        if self._failure is not None:
            raise self._failure
        self._load_count += 1

        persona_raw = self._store.get_item(PERSONA_RECORD)
        user_raw = self._store.get_item(USER_RECORD)
        if not persona_raw or not user_raw:
            self._failure = IdentityMissing(
                f"missing {PERSONA_RECORD!r} or {USER_RECORD!r}"
            )
            logger.error("No persona or user data found in identity store")
            raise self._failure

        try:
            persona = _decode_record(persona_raw, PERSONA_RECORD)
            user = _decode_record(user_raw, USER_RECORD)
        except IdentityMissing as exc:
            self._failure = exc
            logger.error("Error parsing identity records: %s", exc.reason)
            raise

        self._session = Session.from_records(persona, user)
        logger.info("Loaded session for %s", self._session.username or "<no username>")
        return self._session


def store_identity(store: IdentityStore, session: Session) -> None:
    """Write *session* as the two identity records (login bootstrap)."""
    persona, user = session.to_records()
    store.set_item(PERSONA_RECORD, json.dumps(persona))
    store.set_item(USER_RECORD, json.dumps(user))
    logger.info("Stored identity for %s in %s", session.username, store.path)
