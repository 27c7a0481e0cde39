"""
Client IP resolution behind proxies.
"""

from typing import Optional

from fastapi import Request

# Checked in order; first header present wins
CLIENT_IP_HEADERS = (
    "x-vercel-forwarded-for",
    "x-real-ip",
    "x-forwarded-for",
    "cf-connecting-ip",
)


def get_client_ip(request: Request) -> Optional[str]:
    """
    Resolve the client IP.

    Uses the left-most address of the first proxy header present, falling
    back to the socket peer. Returns None when nothing is known.
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if not value:
            continue
        first = value.split(",")[0].strip()
        if first:
            return first

    if request.client and request.client.host:
        return request.client.host
    return None
