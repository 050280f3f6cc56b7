"""Server-side session store and the request gate built on it.

The cookie only carries an opaque token; the store maps it to a user id with an
expiry. Role and assignments are reloaded from storage on every request, so a
promotion or a new assignment takes effect without logging in again.
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import wraps
from typing import Callable, Optional, Protocol

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .model import Identity
from .service import AuthService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: int
    created_at: datetime
    expires_at: datetime


class SessionStore(Protocol):
    def create(self, user_id: int) -> SessionRecord:
        raise NotImplementedError

    def get(self, token: str) -> Optional[SessionRecord]:
        raise NotImplementedError

    def destroy(self, token: str) -> bool:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local token store.

    Good for a single worker; swap in another ``SessionStore`` for multi-process deployments.
    """

    def __init__(self, *, max_age_seconds: int, clock: Callable[[], datetime] = datetime.now):
        self._ttl = timedelta(seconds=int(max_age_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[str, SessionRecord] = {}

    def create(self, user_id: int) -> SessionRecord:
        now = self._clock()
        record = SessionRecord(
            token=secrets.token_urlsafe(32),
            user_id=int(user_id),
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._purge_expired(now)
            self._records[record.token] = record
        return record

    def get(self, token: str) -> Optional[SessionRecord]:
        if not token:
            return None
        now = self._clock()
        with self._lock:
            record = self._records.get(token)
            if record and record.expires_at <= now:
                del self._records[token]
                return None
            return record

    def destroy(self, token: str) -> bool:
        with self._lock:
            return self._records.pop(token, None) is not None

    def _purge_expired(self, now: datetime) -> None:
        expired = [t for t, r in self._records.items() if r.expires_at <= now]
        for t in expired:
            del self._records[t]


class SessionGate:
    """Resolves the session cookie into an ``Identity`` and guards views."""

    def __init__(self, store: SessionStore, auth: AuthService, *, cookie_name: str):
        self._store = store
        self._auth = auth
        self.cookie_name = cookie_name

    @property
    def store(self) -> SessionStore:
        return self._store

    def current_identity(self) -> Optional[Identity]:
        if "identity" in g:
            return g.identity

        identity = None
        token = request.cookies.get(self.cookie_name)
        record = self._store.get(token) if token else None
        if record:
            identity = self._auth.load_identity(record.user_id)
            if identity is None:
                # account vanished while the session was alive
                self._store.destroy(record.token)
        g.identity = identity
        return identity

    def require_identity(self) -> Identity:
        identity = self.current_identity()
        if identity is None:
            raise AuthenticationError("Authentication required")
        return identity

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self.require_identity()
            return view(*args, **kwargs)

        return wrapper

    def roles_required(self, *roles: Role):
        allowed = {Role(r) for r in roles}

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                identity = self.require_identity()
                if identity.role not in allowed:
                    logger.warning("User %s (%s) denied %s", identity.username, identity.role.value, request.path)
                    raise AuthorizationError("Insufficient permissions")
                return view(*args, **kwargs)

            return wrapper

        return decorator
