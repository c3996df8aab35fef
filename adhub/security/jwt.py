"""
Bearer access tokens accepted by the API.

Tokens are compact HS256 JWTs. The API only reads who the caller is (``sub``)
and which organization they act in (``org``).
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import base64
import hashlib
import hmac
import json

from adhub.config import get_settings

settings = get_settings()
ALGORITHM = "HS256"
TOKEN_TYPE = "access"


class AccessTokenError(ValueError):
    pass


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    organization_id: int
    expires_at: datetime


def _to_segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _from_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _json_segment(data: dict) -> str:
    return _to_segment(json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _signature(signing_input: str) -> str:
    digest = hmac.new(settings.jwt_secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256)
    return _to_segment(digest.digest())


def create_access_token(*, user_id: int, organization_id: int, ttl_minutes: int | None = None) -> str:
    """Issue a token for a user acting inside one organization."""
    issued_at = datetime.now(timezone.utc)
    ttl = settings.access_ttl_minutes if ttl_minutes is None else ttl_minutes
    head = _json_segment({"alg": ALGORITHM, "typ": "JWT"})
    body = _json_segment(
        {
            "sub": str(user_id),
            "org": str(organization_id),
            "typ": TOKEN_TYPE,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(minutes=ttl)).timestamp()),
        }
    )
    return ".".join((head, body, _signature(f"{head}.{body}")))


def decode_access_token(token: str) -> AccessClaims:
    parts = token.split(".")
    if len(parts) != 3:
        raise AccessTokenError("Invalid access token")
    head, body, signature = parts

    expected = _signature(f"{head}.{body}")
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        raise AccessTokenError("Invalid access token signature")

    try:
        header = json.loads(_from_segment(head))
        claims = json.loads(_from_segment(body))
    except ValueError as exc:
        raise AccessTokenError("Malformed token payload") from exc
    if not isinstance(header, dict) or not isinstance(claims, dict):
        raise AccessTokenError("Malformed token payload")

    if header.get("alg") != ALGORITHM:
        raise AccessTokenError("Unexpected token algorithm")
    if claims.get("typ") != TOKEN_TYPE:
        raise AccessTokenError("Invalid token type")

    exp = claims.get("exp")
    if not isinstance(exp, int):
        raise AccessTokenError("Token exp claim is missing")
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    if datetime.now(timezone.utc) >= expires_at:
        raise AccessTokenError("Access token has expired")

    try:
        return AccessClaims(
            user_id=int(claims["sub"]),
            organization_id=int(claims["org"]),
            expires_at=expires_at,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AccessTokenError("Token payload is incomplete") from exc
