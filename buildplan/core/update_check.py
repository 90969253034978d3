"""Best-effort check for a newer buildplan release.

Runs outside the detection pipeline: the CLI calls it after the plan has
been printed, and any failure (network, HTTP status, malformed payload)
yields None instead of an exception.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

TAGS_URL = "https://api.github.com/repos/buildplan/buildplan/tags"
RELEASES_URL = "https://github.com/buildplan/buildplan/releases/latest"

# Timeout for the tags request, in seconds
UPDATE_CHECK_TIMEOUT = 5.0


def check_for_update(current: str, timeout: float = UPDATE_CHECK_TIMEOUT) -> Optional[str]:
    """Return the latest release tag if it is newer than `current`."""
    try:
        latest = _fetch_latest_tag(timeout)
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug("Update check failed: %s", exc)
        return None

    if latest and latest != current and is_newer(latest, current):
        return latest
    return None


def _fetch_latest_tag(timeout: float) -> Optional[str]:
    with httpx.Client(timeout=timeout) as client:
        response = client.get(TAGS_URL, params={"per_page": 10})
        response.raise_for_status()
        tags = response.json()

    if not isinstance(tags, list):
        raise ValueError("unexpected tags payload")

    for tag in tags:
        name = tag.get("name", "") if isinstance(tag, dict) else ""
        if name.startswith("v"):
            return name
    return None


def is_newer(latest: str, current: str) -> bool:
    """Compare major.minor.patch numerically; non-numeric parts count as 0."""
    latest_parts = _version_parts(latest)
    current_parts = _version_parts(current)
    return latest_parts > current_parts


def _version_parts(version: str) -> tuple[int, int, int]:
    parts = version.strip().removeprefix("v").split(".")
    numbers: list[int] = []
    for i in range(3):
        raw = parts[i] if i < len(parts) else ""
        digits = ""
        for ch in raw:
            if not ch.isdigit():
                break
            digits += ch
        numbers.append(int(digits) if digits else 0)
    return numbers[0], numbers[1], numbers[2]
