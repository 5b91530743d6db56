"""Apply-URL normalization for generated listings.

Generated URLs are displayed as links, never fetched, so validation is
syntactic: absolute http(s) with a public-looking host.
"""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

_BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain"}


def normalize_apply_url(url: str) -> str | None:
    """Return the cleaned URL, or None when it is not a usable absolute link."""
    url = url.strip()
    if not url:
        return None
    if "://" not in url and url.startswith("www."):
        url = f"https://{url}"

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return None

    hostname = parsed.hostname
    if not hostname or hostname.lower() in _BLOCKED_HOSTNAMES:
        return None

    try:
        addr = ipaddress.ip_address(hostname)
    except ValueError:
        return url if "." in hostname else None
    if addr.is_private or addr.is_loopback or addr.is_reserved or addr.is_link_local:
        return None
    return url
