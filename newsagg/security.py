from __future__ import annotations

import ipaddress
from urllib.parse import urlsplit

from .errors import BlockedHostError

ALLOWED_SCHEMES = frozenset({"http", "https"})


def ensure_public_url(url: str) -> str:
    """Reject URLs that could reach loopback or private-network hosts.

    Returns the URL unchanged when it passes. Only IP literals are checked
    against address ranges; hostnames are not resolved here.
    """
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise BlockedHostError(url, f"malformed url ({exc})") from exc

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise BlockedHostError(url, f"scheme {parts.scheme!r} not allowed")

    host = (parts.hostname or "").rstrip(".").lower()
    if not host:
        raise BlockedHostError(url, "missing host")
    if host == "localhost" or host.endswith(".localhost"):
        raise BlockedHostError(url, "local addresses blocked")

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return url

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped
    if (
        address.is_loopback
        or address.is_private
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    ):
        raise BlockedHostError(url, "local addresses blocked")
    return url
