"""
Identity dependencies for FastAPI.

Authentication happens upstream; by the time a request reaches this service
the verified caller identity is carried in a trusted header
(``X-User-Email`` by default).
"""

from typing import Optional
from fastapi import Request
from ledback.app.core.config import settings
from ledback.app.core.exceptions import AuthenticationError
from ledback.app.domain.ownership import OwnerId


def get_optional_owner(request: Request) -> OwnerId:
    """Caller identity, or ``OwnerId.GLOBAL`` when the header is absent."""
    raw: Optional[str] = request.headers.get(settings.owner_header)
    return OwnerId.parse(raw)


def get_current_owner(request: Request) -> OwnerId:
    """
    FastAPI dependency returning the caller identity.
    
    Raises:
        AuthenticationError: 401 if the identity header is missing or blank
    """
    owner = get_optional_owner(request)
    if owner.is_global:
        raise AuthenticationError(f"Missing {settings.owner_header} header")
    return owner
