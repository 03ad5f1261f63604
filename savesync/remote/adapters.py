"""
Response-shape adapter for the saved-campaigns list.

``GET /saved-campaigns/my`` has answered with several entry shapes over
time. This is the only place that knows about them; everything past the
remote boundary works with ``SavedCampaignEntry``.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..utils.ids import is_campaign_id

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SavedCampaignEntry:
    """One saved campaign as reported by the backend."""
    campaign_id: int
    saved_entry_id: Optional[int] = None             # Id of the saved-campaign row, when distinct


def _as_campaign_id(value: Any) -> Optional[int]:
    """Accept ints and all-digit strings."""
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    return value if is_campaign_id(value) else None


def extract_campaign_id(item: Any) -> Optional[int]:
    """
    Resolve the campaign id of a list entry.

    Tried in order: ``item.campaignId``, ``item.campaign.id``, numeric
    ``item.id``. A bare integer entry is its own campaign id.

    Returns:
        Campaign id, or None when the entry cannot be resolved
    """
    if is_campaign_id(item):
        return item

    if not isinstance(item, dict):
        return None

    campaign_id = _as_campaign_id(item.get("campaignId"))
    if campaign_id is not None:
        return campaign_id

    campaign = item.get("campaign")
    if isinstance(campaign, dict):
        campaign_id = _as_campaign_id(campaign.get("id"))
        if campaign_id is not None:
            return campaign_id

    # Only a numeric id counts; string ids belong to other record types
    if is_campaign_id(item.get("id")):
        return item["id"]

    return None


def to_saved_entry(item: Any) -> Optional[SavedCampaignEntry]:
    """Adapt one raw list entry, or None if it is unusable."""
    campaign_id = extract_campaign_id(item)
    if campaign_id is None:
        return None

    saved_entry_id = None
    if isinstance(item, dict) and is_campaign_id(item.get("id")) and item["id"] != campaign_id:
        saved_entry_id = item["id"]

    return SavedCampaignEntry(campaign_id=campaign_id, saved_entry_id=saved_entry_id)


def parse_saved_list(payload: Any) -> list[SavedCampaignEntry]:
    """
    Adapt a whole list response.

    Unresolvable entries are skipped and logged; duplicate campaign ids are
    dropped keeping the first occurrence.

    Raises:
        ValueError: If the payload is not a list
    """
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of saved campaigns, got {type(payload).__name__}")

    entries = []
    seen: set[int] = set()
    skipped = 0

    for item in payload:
        entry = to_saved_entry(item)
        if entry is None:
            skipped += 1
            continue
        if entry.campaign_id in seen:
            continue
        seen.add(entry.campaign_id)
        entries.append(entry)

    if skipped:
        logger.warning("Skipped unresolvable saved campaign entries", skipped=skipped)

    return entries
