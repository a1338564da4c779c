# -*- coding: utf-8 -*-
"""Auth — bearer token verification for FastAPI routes.

Users sign in through a separate auth service, which issues HS256 JWTs
signed with a secret shared with this API. Here we only check the
signature and expiry and pull the caller's id out of the claims; there
is no user table on this side.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from ..config import settings
from ..errors import Unauthorized

TOKEN_COOKIE_NAME = "authToken"

_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _signature(signed_part: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signed_part.encode("ascii"), hashlib.sha256).digest()


def create_access_token(*, user_id: str, ttl_seconds: int = 7 * 24 * 3600, secret: str | None = None) -> str:
    """Mint a token in the auth service's format (local tooling and tests)."""
    issued = int(time.time())
    claims = {"sub": user_id, "iat": issued, "exp": issued + ttl_seconds}
    signed_part = ".".join(
        _b64(json.dumps(part, separators=(",", ":")).encode("utf-8")) for part in (_HEADER, claims)
    )
    return f"{signed_part}.{_b64(_signature(signed_part, secret or settings.jwt_secret))}"


def verify_token(token: str, secret: str | None = None) -> Dict[str, Any]:
    """Return the claims of a valid token; raise Unauthorized otherwise."""
    try:
        header_part, claims_part, sig_part = token.split(".")
        header = json.loads(_unb64(header_part))
        expected = _signature(f"{header_part}.{claims_part}", secret or settings.jwt_secret)
        signature_ok = hmac.compare_digest(expected, _unb64(sig_part))
        claims = json.loads(_unb64(claims_part))
    except ValueError as exc:
        # Wrong segment count, bad base64 and bad JSON all end up here.
        raise Unauthorized("Invalid token") from exc

    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise Unauthorized("Invalid token")
    if not signature_ok or not isinstance(claims, dict):
        raise Unauthorized("Invalid token")
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and exp < time.time():
        raise Unauthorized("Token expired")
    return claims


def get_token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(TOKEN_COOKIE_NAME) or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    cached = getattr(request.state, "user", None)
    if cached:
        return cached

    token = get_token_from_request(request)
    if not token:
        raise Unauthorized("Access denied. No token provided.")

    claims = verify_token(token)
    # Older tokens carry the id as `userId` instead of `sub`.
    user_id = str(claims.get("sub") or claims.get("userId") or "")
    if not user_id:
        raise Unauthorized("Invalid token")

    user = {"id": user_id, "email": claims.get("email")}
    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
