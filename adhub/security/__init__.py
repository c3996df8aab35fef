from adhub.security.jwt import AccessClaims, AccessTokenError, create_access_token, decode_access_token

__all__ = [
    "AccessClaims",
    "AccessTokenError",
    "create_access_token",
    "decode_access_token",
]
