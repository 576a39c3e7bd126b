# clinic_core/iam/tokens.py
"""
Session tokens minted with simplejwt token classes.

Lifetimes, algorithm and signing key come from settings.SIMPLE_JWT. Every token
carries sub, email, role_id, tenant_id (when the account is tenant-bound), iat,
exp, jti and token_type. The jti makes two tokens minted in the same second
distinct, which refresh rotation depends on.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone

from rest_framework_simplejwt.tokens import AccessToken, RefreshToken, Token


class SessionAccessToken(AccessToken):
    pass


class SessionRefreshToken(RefreshToken):
    pass


@dataclass(frozen=True)
class TokenPair:
    access: str
    refresh: str
    refresh_expires_at: datetime


def _apply_claims(token: Token, user) -> Token:
    token["sub"] = str(user.id)
    token["email"] = user.email
    token["role_id"] = user.role_id
    if user.tenant_id is not None:
        token["tenant_id"] = str(user.tenant_id)
    return token


def issue_token_pair(user) -> TokenPair:
    access = _apply_claims(SessionAccessToken(), user)
    refresh = _apply_claims(SessionRefreshToken(), user)
    return TokenPair(
        access=str(access),
        refresh=str(refresh),
        refresh_expires_at=datetime.fromtimestamp(refresh["exp"], tz=dt_timezone.utc),
    )
