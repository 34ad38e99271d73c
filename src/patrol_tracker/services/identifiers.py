"""External-facing identifiers and the checkpoint payload encoding."""

import json

from patrol_tracker.domain.organization import Area, Checkpoint, Company, OrgNode, Site
from patrol_tracker.domain.scans import PAYLOAD_TYPE


def resolve_identifier(node: OrgNode) -> str:
    """Return the identifier printed on payloads for a node.

    A custom id wins when it has visible characters; otherwise the internal
    key is used.
    """
    custom_id = node.custom_id
    if custom_id and custom_id.strip():
        return custom_id
    return node.id


def encode_checkpoint_payload(
    company: Company, site: Site, area: Area, checkpoint: Checkpoint
) -> str:
    """Build the text encoded on a printed checkpoint code."""
    data = {
        "type": PAYLOAD_TYPE,
        "pointId": checkpoint.id,
        "companyIdentifier": resolve_identifier(company),
        "siteIdentifier": resolve_identifier(site),
        "areaIdentifier": resolve_identifier(area),
    }
    # Compact separators match codes already printed in the field.
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
