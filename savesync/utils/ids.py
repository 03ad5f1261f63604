"""Campaign identifier validation."""

from typing import Any

from ..errors import InvalidCampaignIdError


def validate_campaign_id(value: Any) -> int:
    """
    Return ``value`` as a campaign id or raise.

    Campaign ids are positive integers. Booleans are rejected even though
    they are ``int`` subclasses.

    Raises:
        InvalidCampaignIdError: If the value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidCampaignIdError(
            f"Invalid campaign ID: {value!r}",
            campaign_id=value
        )
    return value


def is_campaign_id(value: Any) -> bool:
    """True when ``value`` is usable as a campaign id."""
    return not isinstance(value, bool) and isinstance(value, int) and value > 0
