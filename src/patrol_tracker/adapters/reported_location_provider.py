"""Location provider backed by what the scanning device reported."""

from dataclasses import dataclass

from patrol_tracker.domain.patrols import GeoPoint
from patrol_tracker.services.geolocation import (
    LocationError,
    LocationErrorKind,
    LocationProvider,
)


@dataclass(frozen=True)
class ReportedLocationProvider(LocationProvider):
    """Replays the fix (or failure) sent along with a scan request."""

    location: GeoPoint | None = None
    error: LocationErrorKind | None = None

    async def current_position(self) -> GeoPoint:
        """Return the reported fix or raise the reported failure."""
        if self.error is not None:
            raise LocationError(self.error)
        if self.location is None:
            raise LocationError(
                LocationErrorKind.POSITION_UNAVAILABLE, "No location reported"
            )
        return self.location
