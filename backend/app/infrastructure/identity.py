"""JWT Identity Provider — resolves a bearer token into a verified actor id.

Invariants:
    - Missing, malformed, expired, or badly-signed tokens resolve to None (anonymous)
    - The actor id is the `sub` claim, falling back to `id`; never an empty string
    - Actor ids longer than MAX_ACTOR_ID_LENGTH resolve to None (they cannot be stored)
    - Tokens are only verified here, never issued

Design Decisions:
    - None instead of raising: anonymous reads are allowed, and the services decide
      whether an operation needs an actor (UnauthenticatedError lives there)
"""

import logging

import jwt

from app.core.domain_types import MAX_ACTOR_ID_LENGTH, ActorId

logger = logging.getLogger(__name__)


class JwtIdentityProvider:
    """IdentityProvider that verifies HS256 (or configured) JWTs with PyJWT."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithms = [algorithm]

    async def resolve_actor(self, credential: str | None) -> ActorId | None:
        if not credential:
            return None
        try:
            payload = jwt.decode(credential, self._secret, algorithms=self._algorithms)
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except jwt.PyJWTError as e:
            logger.info(f"Rejected invalid token: {e}")
            return None

        actor = payload.get("sub") or payload.get("id")
        if not actor:
            logger.info("Token carries no actor claim")
            return None
        actor = str(actor)
        if len(actor) > MAX_ACTOR_ID_LENGTH:
            logger.info(f"Rejected token with {len(actor)}-char actor id")
            return None
        return ActorId(actor)
