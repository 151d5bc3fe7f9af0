"""Location Source - Imperative Shell.

This module publishes the device position and location permission state
to subscribers. Platform adapters push updates in through
``update_position`` and ``update_authorization``; FixedLocationSource
reports a configured position for headless use.
"""

import logging
from enum import Enum
from typing import Callable

from discovery_feed.core.geo import Position


logger = logging.getLogger(__name__)


PositionListener = Callable[[Position | None], None]
AuthorizationListener = Callable[["AuthorizationStatus"], None]


class AuthorizationStatus(str, Enum):
    """Location permission state."""
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"

    @property
    def is_blocked(self) -> bool:
        """True when the user or system has refused location access."""
        return self in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED)


class LocationSource:
    """Best-known position plus authorization state, with change listeners.

    Listeners are called on whichever thread delivers the update; consumers
    that need a specific execution context must marshal themselves.
    """

    def __init__(
        self,
        position: Position | None = None,
        authorization: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED,
    ) -> None:
        """Initialize location source.

        Args:
            position: Initial fix, None if none yet
            authorization: Initial permission state
        """
        self._position = position
        self._authorization = authorization
        self._listeners: list[tuple[PositionListener, AuthorizationListener]] = []
        self.updating = False
        self.last_error: str | None = None

    @property
    def position(self) -> Position | None:
        return self._position

    @property
    def authorization(self) -> AuthorizationStatus:
        return self._authorization

    def subscribe(
        self,
        on_position: PositionListener,
        on_authorization: AuthorizationListener,
    ) -> Callable[[], None]:
        """Register listeners.

        Returns:
            Zero-argument function that removes the listeners
        """
        entry = (on_position, on_authorization)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def request_permission(self) -> None:
        """Ask the platform for location access. No-op by default."""

    def start_updates(self) -> None:
        """Begin delivering position updates."""
        self.updating = True

    def stop_updates(self) -> None:
        """Stop delivering position updates."""
        self.updating = False

    def update_position(self, position: Position | None) -> None:
        """Record a new fix and notify listeners."""
        self._position = position
        for on_position, _ in list(self._listeners):
            on_position(position)

    def update_authorization(self, status: AuthorizationStatus) -> None:
        """Record a permission change and notify listeners.

        Granting access starts updates; refusing it stops them.
        """
        self._authorization = status

        if status == AuthorizationStatus.AUTHORIZED:
            self.last_error = None
            self.start_updates()
        elif status.is_blocked:
            self.stop_updates()
            self.last_error = "Location access denied"
            logger.warning("Location access %s", status.value)

        for _, on_authorization in list(self._listeners):
            on_authorization(status)


class FixedLocationSource(LocationSource):
    """Reports a single configured position with access already granted."""

    def __init__(self, position: Position) -> None:
        super().__init__(position=position, authorization=AuthorizationStatus.AUTHORIZED)

    def request_permission(self) -> None:
        if self.authorization != AuthorizationStatus.AUTHORIZED:
            self.update_authorization(AuthorizationStatus.AUTHORIZED)
