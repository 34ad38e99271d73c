"""Pydantic models for patrol request bodies."""

from pydantic import BaseModel, Field

from patrol_tracker.services.geolocation import LocationErrorKind

# Alphanumeric capacity of a version 40 QR code.
MAX_PAYLOAD_LENGTH = 4296


class StartPatrolRequest(BaseModel):
    """Details collected before a patrol begins."""

    officer_name: str = ""
    company_id: str = ""
    site_id: str = ""
    area_id: str = ""
    shift: str = ""


class ReportedLocation(BaseModel):
    """Device position captured alongside a scan."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ScanRequest(BaseModel):
    """A decoded checkpoint code plus the device's location result."""

    payload: str = Field(max_length=MAX_PAYLOAD_LENGTH)
    location: ReportedLocation | None = None
    location_error: LocationErrorKind | None = None


class SignatureRequest(BaseModel):
    """Officer signature as an opaque data URL."""

    signature: str | None = None
