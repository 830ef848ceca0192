"""Share links for player profiles.

A share link is ``<origin>/player/<profile_id>``. It carries no signature or
expiry; any id in that position is a lookup key.
"""

from typing import Optional
from urllib.parse import quote, unquote, urlsplit

SHARE_PATH_PREFIX = "/player/"


def build_share_url(origin: str, profile_id: str) -> str:
    """Build the public share URL for a profile."""
    return f"{origin.rstrip('/')}{SHARE_PATH_PREFIX}{quote(profile_id, safe='')}"


def parse_share_url(url: str) -> Optional[str]:
    """Extract the profile id from a share URL or path.

    Returns:
        The profile id, or None if the URL is not a share link.
    """
    path = urlsplit(url).path if "://" in url else url.split("?", 1)[0].split("#", 1)[0]
    if not path.startswith(SHARE_PATH_PREFIX):
        return None

    profile_id = unquote(path[len(SHARE_PATH_PREFIX):].rstrip("/"))
    if not profile_id or "/" in profile_id:
        return None
    return profile_id
