"""Authentication module for Auth0 JWT validation."""
import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from core.config import Settings, get_settings
from services.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# Caller id used for every request when DEV_MODE is on
DEV_CALLER_ID = "dev|local-development-user"

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.auth0_jwks_url not in _jwks_clients:
        _jwks_clients[settings.auth0_jwks_url] = PyJWKClient(
            settings.auth0_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.auth0_jwks_url]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a JWT token from Auth0.

    Raises:
        HTTPException: 401 if token is invalid, expired, or has wrong audience/issuer;
            503 if the signing keys cannot be fetched.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )

    except jwt.PyJWKClientConnectionError as e:
        logger.error("Could not fetch JWKS from %s: %s", settings.auth0_jwks_url, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        ) from e
    except jwt.ExpiredSignatureError as e:
        raise _unauthorized("Token has expired") from e
    except jwt.InvalidAudienceError as e:
        raise _unauthorized("Invalid audience") from e
    except jwt.InvalidIssuerError as e:
        raise _unauthorized("Invalid issuer") from e
    except jwt.PyJWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise _unauthorized("Invalid token") from e


async def get_optional_caller_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """
    Resolve the caller id (the token's 'sub' claim), or None for anonymous requests.

    A token that is present but invalid is rejected rather than treated as anonymous.
    In DEV_MODE every request runs as DEV_CALLER_ID.
    """
    if settings.dev_mode:
        return DEV_CALLER_ID

    if credentials is None:
        return None

    payload = decode_jwt(credentials.credentials, settings)
    caller_id = payload.get("sub")
    if not caller_id:
        raise _unauthorized("Invalid token: missing sub claim")
    return caller_id


async def get_caller_id(
    caller_id: str | None = Depends(get_optional_caller_id),
) -> str:
    """
    Require an authenticated caller.

    Raises:
        UnauthorizedError: If the request carries no credentials.
    """
    if caller_id is None:
        raise UnauthorizedError("Not authenticated")
    return caller_id
