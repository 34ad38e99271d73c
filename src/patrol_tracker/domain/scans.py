"""Domain models for checkpoint scans."""

from dataclasses import dataclass
from enum import Enum

from patrol_tracker.domain.organization import Checkpoint
from patrol_tracker.domain.patrols import ScanRecord

PAYLOAD_TYPE = "patrol-point"


@dataclass(frozen=True)
class ScanPayload:
    """Decoded content of a checkpoint code."""

    type: str
    checkpoint_id: str
    company_identifier: str
    site_identifier: str
    area_identifier: str


class RejectionReason(str, Enum):
    """Why a scan attempt did not produce a scan record."""

    MALFORMED_PAYLOAD = "malformed_payload"
    UNRECOGNIZED_PAYLOAD = "unrecognized_payload"
    WRONG_COMPANY = "wrong_company"
    WRONG_SITE = "wrong_site"
    WRONG_AREA = "wrong_area"
    CHECKPOINT_NOT_FOUND = "checkpoint_not_found"
    ALREADY_SCANNED = "already_scanned"
    LOCATION_UNAVAILABLE = "location_unavailable"
    LOCATION_PERMISSION_DENIED = "location_permission_denied"
    LOCATION_TIMEOUT = "location_timeout"
    SCAN_CANCELLED = "scan_cancelled"

    @property
    def is_notice(self) -> bool:
        """Informational outcomes are surfaced as notices, not errors."""
        return self is RejectionReason.ALREADY_SCANNED


_MESSAGES = {
    RejectionReason.MALFORMED_PAYLOAD: "Not a valid patrol QR code.",
    RejectionReason.UNRECOGNIZED_PAYLOAD: "Invalid or unrecognized QR code.",
    RejectionReason.WRONG_COMPANY: (
        "Error: This point belongs to a different company."
    ),
    RejectionReason.WRONG_SITE: "Error: This point belongs to a different site.",
    RejectionReason.WRONG_AREA: "Error: This point belongs to a different area.",
    RejectionReason.CHECKPOINT_NOT_FOUND: (
        "Scanned point not found in the current patrol area."
    ),
    RejectionReason.ALREADY_SCANNED: "{name} has already been scanned.",
    RejectionReason.LOCATION_UNAVAILABLE: "Could not get location. Scan aborted.",
    RejectionReason.LOCATION_PERMISSION_DENIED: (
        "Location permission denied. Scan aborted."
    ),
    RejectionReason.LOCATION_TIMEOUT: "Location request timed out. Scan aborted.",
    RejectionReason.SCAN_CANCELLED: "Scan cancelled.",
}


def rejection_message(
    reason: RejectionReason, checkpoint: Checkpoint | None = None
) -> str:
    """Return the user-facing message for a rejection."""
    name = checkpoint.name if checkpoint else "This point"
    return _MESSAGES[reason].format(name=name)


@dataclass(frozen=True)
class ScanValidation:
    """Result of validating a payload against a session."""

    checkpoint: Checkpoint | None = None
    rejection: RejectionReason | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None and self.checkpoint is not None


@dataclass(frozen=True)
class ScanOutcome:
    """Result of a scan attempt reported back to the caller."""

    record: ScanRecord | None = None
    rejection: RejectionReason | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.record is not None

    @property
    def severity(self) -> str:
        if self.record is not None:
            return "success"
        if self.rejection is not None and self.rejection.is_notice:
            return "info"
        return "error"
