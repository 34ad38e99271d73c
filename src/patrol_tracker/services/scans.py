"""Validation of decoded checkpoint payloads."""

import json

from patrol_tracker.domain.patrols import PatrolSession
from patrol_tracker.domain.scans import (
    PAYLOAD_TYPE,
    RejectionReason,
    ScanPayload,
    ScanValidation,
)
from patrol_tracker.services.directory import DirectorySnapshot
from patrol_tracker.services.identifiers import resolve_identifier

_WIRE_FIELDS = (
    ("pointId", "checkpoint_id"),
    ("companyIdentifier", "company_identifier"),
    ("siteIdentifier", "site_identifier"),
    ("areaIdentifier", "area_identifier"),
)


def parse_payload(raw: object) -> ScanPayload | RejectionReason:
    """Decode scanned text into a payload, or the reason it is unusable."""
    if not isinstance(raw, str | bytes):
        return RejectionReason.MALFORMED_PAYLOAD
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError):
        return RejectionReason.MALFORMED_PAYLOAD
    if not isinstance(data, dict) or data.get("type") != PAYLOAD_TYPE:
        return RejectionReason.UNRECOGNIZED_PAYLOAD
    values: dict[str, str] = {}
    for wire_key, attribute in _WIRE_FIELDS:
        value = data.get(wire_key)
        if not isinstance(value, str) or not value:
            return RejectionReason.UNRECOGNIZED_PAYLOAD
        values[attribute] = value
    return ScanPayload(type=PAYLOAD_TYPE, **values)


def validate_scan(
    raw: object, session: PatrolSession, directory: DirectorySnapshot
) -> ScanValidation:
    """Accept or reject a scan for the session without changing it.

    Identifier checks run company, then site, then area, so the operator is
    told the broadest mismatch first.
    """
    payload = parse_payload(raw)
    if isinstance(payload, RejectionReason):
        return ScanValidation(rejection=payload)

    if payload.company_identifier != resolve_identifier(directory.company):
        return ScanValidation(rejection=RejectionReason.WRONG_COMPANY)
    if payload.site_identifier != resolve_identifier(directory.site):
        return ScanValidation(rejection=RejectionReason.WRONG_SITE)
    if payload.area_identifier != resolve_identifier(directory.area):
        return ScanValidation(rejection=RejectionReason.WRONG_AREA)

    checkpoint = directory.lookup(payload.checkpoint_id)
    if checkpoint is None:
        return ScanValidation(rejection=RejectionReason.CHECKPOINT_NOT_FOUND)
    if session.has_scanned(checkpoint.id):
        return ScanValidation(
            checkpoint=checkpoint, rejection=RejectionReason.ALREADY_SCANNED
        )
    return ScanValidation(checkpoint=checkpoint)
