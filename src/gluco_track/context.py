"""Contexto de cliente inyectado (store + identidad + reloj)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from gluco_track.errors import AuthRequiredError
from gluco_track.storage import ReadingStore
from gluco_track.timestamps import now_millis


@dataclass(frozen=True)
class ClientContext:
    """Explicit handle passed to feeds, device links and simulators.

    ``user_id`` comes from the external identity provider; None means the
    user is signed out.
    """

    store: ReadingStore
    user_id: str | None = None
    clock: Callable[[], int] = field(default=now_millis)

    def require_user(self) -> str:
        """Return the user id or fail fast when signed out."""
        if not self.user_id:
            raise AuthRequiredError("Sign in to access readings")
        return self.user_id

    def now(self) -> int:
        return self.clock()
