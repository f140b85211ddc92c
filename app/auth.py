"""
Service-level authentication for maintenance endpoints.

Maintenance operations are called by a scheduler holding the privileged
service credential, never by end users.
"""
import hmac
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings, get_settings
from app.exceptions import ServiceAuthError

bearer_scheme = HTTPBearer(auto_error=False)


async def require_service_role(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Check the bearer token against the configured service role key.

    Raises ConfigurationError before looking at the request when the
    service has no credential or database configured.
    """
    settings.require_persistence()

    if credentials is None:
        raise ServiceAuthError("Missing bearer credential")

    if not hmac.compare_digest(credentials.credentials.encode(), settings.service_role_key.encode()):
        raise ServiceAuthError("Invalid service credential")
