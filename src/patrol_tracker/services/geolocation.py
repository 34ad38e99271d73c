"""Location capture for accepted scans."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from patrol_tracker.domain.patrols import GeoPoint


class LocationErrorKind(str, Enum):
    """Ways a location request can fail."""

    POSITION_UNAVAILABLE = "position_unavailable"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"


class LocationError(Exception):
    """Raised when no location fix could be obtained."""

    def __init__(self, kind: LocationErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        super().__init__(detail or kind.value)


class ScanCancelledError(Exception):
    """Raised when the operator abandons a scan during capture."""


class LocationProvider(Protocol):
    """Platform source of the device position."""

    async def current_position(self) -> GeoPoint:
        """Return the current position or raise LocationError."""


@dataclass
class CancellationToken:
    """Signals that an in-flight scan should be abandoned."""

    _event: asyncio.Event = field(default_factory=asyncio.Event)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class GeolocationGate:
    """Holds a scan until the device location resolves or fails."""

    provider: LocationProvider
    timeout_seconds: float = 30.0

    async def capture(self, cancellation: CancellationToken | None = None) -> GeoPoint:
        """Return the device position for the scan being recorded."""
        if cancellation is not None and cancellation.cancelled:
            raise ScanCancelledError
        position = asyncio.ensure_future(self.provider.current_position())
        waiters: set[asyncio.Future] = {position}
        cancelled: asyncio.Future | None = None
        if cancellation is not None:
            cancelled = asyncio.ensure_future(cancellation.wait())
            waiters.add(cancelled)
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()
        if position in done:
            return position.result()
        if cancelled is not None and cancelled in done:
            raise ScanCancelledError
        raise LocationError(LocationErrorKind.TIMEOUT)
