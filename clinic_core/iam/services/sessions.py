# clinic_core/iam/services/sessions.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.contrib.auth.hashers import check_password, make_password
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework_simplejwt.exceptions import TokenError

from clinic_core.common.api.exceptions import BadRequest, ConflictError, TenantInactive
from clinic_core.common.utils import parse_uuid
from clinic_core.iam.models import Role, User
from clinic_core.iam.tokens import SessionAccessToken, SessionRefreshToken, TokenPair, issue_token_pair
from clinic_core.tenants.models import Tenant
from clinic_core.tenants.selectors import get_tenant, get_tenant_by_reference

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MSG = "Invalid credentials"
INVALID_REFRESH_MSG = "Invalid refresh token"
INVALID_TOKEN_MSG = "Invalid or expired token."


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class Session:
    user: User
    tokens: TokenPair


class SessionService:
    """
    Session authority: issues and verifies tokens, owns the stored refresh token.

    Failures that concern credentials are deliberately coarse: every login
    failure is the same AuthenticationFailed("Invalid credentials").
    """

    @staticmethod
    def _store_refresh(*, user: User, tokens: TokenPair, **extra) -> None:
        User.objects.filter(id=user.id).update(
            refresh_token=tokens.refresh,
            refresh_token_expires_at=tokens.refresh_expires_at,
            **extra,
        )
        user.refresh_token = tokens.refresh
        user.refresh_token_expires_at = tokens.refresh_expires_at
        for k, v in extra.items():
            setattr(user, k, v)

    @staticmethod
    def _create_account(*, email: str, password: str, role_id: str, tenant: Optional[Tenant], name: str) -> User:
        email = normalize_email(email)
        if not email:
            raise ValidationError({"email": "This field is required."})

        if User.objects.filter(tenant=tenant, email=email).exists():
            raise ConflictError("User with this email already exists.")

        role = Role.objects.filter(id=role_id, is_active=True).first()
        if role is None:
            raise BadRequest("Invalid role ID")

        try:
            validate_password(password)
        except DjangoValidationError as exc:
            raise ValidationError({"password": list(exc.messages)})

        return User.objects.create(
            email=email,
            name=(name or "").strip(),
            password=make_password(password),
            role=role,
            tenant=tenant,
        )

    @staticmethod
    @transaction.atomic
    def register(*, email: str, password: str, role_id: str, tenant_id: UUID, name: str = "") -> Session:
        """Self-service sign-up. Always tenant-bound; platform accounts are created administratively."""
        if tenant_id is None:
            raise ValidationError({"tenant_id": "This field is required."})
        tenant = get_tenant(tenant_id=tenant_id)
        if not tenant.is_active:
            raise TenantInactive()

        user = SessionService._create_account(
            email=email, password=password, role_id=role_id, tenant=tenant, name=name
        )

        tokens = issue_token_pair(user)
        SessionService._store_refresh(user=user, tokens=tokens)
        logger.info("User registered id=%s tenant=%s role=%s", user.id, user.tenant_id, user.role_id)
        return Session(user=user, tokens=tokens)

    @staticmethod
    @transaction.atomic
    def create_platform_account(*, email: str, password: str, role_id: str = "admin", name: str = "") -> User:
        """
        Account with no tenant. It may act inside any tenant and is the only kind of
        account allowed to manage the global registries.
        """
        user = SessionService._create_account(
            email=email, password=password, role_id=role_id, tenant=None, name=name
        )
        logger.info("Platform account created id=%s role=%s", user.id, user.role_id)
        return user

    @staticmethod
    def login(*, email: str, password: str, tenant_hint: Optional[str] = None) -> Session:
        email = normalize_email(email)
        qs = User.objects.select_related("tenant", "role").filter(email=email)

        user: Optional[User] = None
        if tenant_hint:
            tenant = get_tenant_by_reference(reference=tenant_hint)
            if tenant is not None:
                user = qs.filter(tenant=tenant).first()
        else:
            # Without a hint the email has to identify exactly one account.
            candidates = list(qs[:2])
            if len(candidates) == 1:
                user = candidates[0]

        if user is None:
            # keep timing close to the "wrong password" path
            make_password(password)
            logger.info("Login failed: no unique account for email=%s hint=%s", email, tenant_hint)
            raise AuthenticationFailed(INVALID_CREDENTIALS_MSG)

        if not check_password(password, user.password):
            logger.info("Login failed: bad password user=%s", user.id)
            raise AuthenticationFailed(INVALID_CREDENTIALS_MSG)

        if not user.is_active or (user.tenant is not None and not user.tenant.is_active):
            logger.info("Login failed: inactive user or tenant user=%s", user.id)
            raise AuthenticationFailed(INVALID_CREDENTIALS_MSG)

        tokens = issue_token_pair(user)
        SessionService._store_refresh(user=user, tokens=tokens, last_login_at=timezone.now())
        logger.info("Login ok user=%s tenant=%s", user.id, user.tenant_id)
        return Session(user=user, tokens=tokens)

    @staticmethod
    def refresh(*, refresh_token: str) -> Session:
        try:
            token = SessionRefreshToken(refresh_token)
        except TokenError:
            raise AuthenticationFailed(INVALID_REFRESH_MSG)

        user_id = parse_uuid(token.get("sub"))
        user = (
            User.objects.select_related("tenant", "role").filter(id=user_id).first()
            if user_id is not None
            else None
        )
        if user is None or not user.is_active:
            raise AuthenticationFailed(INVALID_REFRESH_MSG)
        if user.tenant is not None and not user.tenant.is_active:
            raise AuthenticationFailed(INVALID_REFRESH_MSG)

        if user.refresh_token != refresh_token:
            logger.info("Refresh rejected: superseded token user=%s", user.id)
            raise AuthenticationFailed(INVALID_REFRESH_MSG)
        if user.refresh_token_expires_at is None or user.refresh_token_expires_at <= timezone.now():
            raise AuthenticationFailed(INVALID_REFRESH_MSG)

        tokens = issue_token_pair(user)

        # compare-and-swap: only one concurrent refresh of the same token wins
        updated = User.objects.filter(id=user.id, refresh_token=refresh_token).update(
            refresh_token=tokens.refresh,
            refresh_token_expires_at=tokens.refresh_expires_at,
        )
        if updated != 1:
            logger.info("Refresh rejected: lost rotation race user=%s", user.id)
            raise AuthenticationFailed(INVALID_REFRESH_MSG)

        user.refresh_token = tokens.refresh
        user.refresh_token_expires_at = tokens.refresh_expires_at
        return Session(user=user, tokens=tokens)

    @staticmethod
    def logout(*, user_id: UUID) -> None:
        # Access tokens already issued stay valid until they expire.
        User.objects.filter(id=user_id).update(refresh_token=None, refresh_token_expires_at=None)
        logger.info("Logout user=%s", user_id)

    @staticmethod
    def verify(access_token: str) -> User:
        try:
            token = SessionAccessToken(access_token)
        except TokenError:
            raise AuthenticationFailed(INVALID_TOKEN_MSG)
        return SessionService.get_subject(token)

    @staticmethod
    def get_subject(token) -> User:
        """Account behind an already validated access token; it must still match the token."""
        user_id = parse_uuid(token.get("sub"))
        user = (
            User.objects.select_related("tenant", "role").filter(id=user_id).first()
            if user_id is not None
            else None
        )
        if user is None or not user.is_active:
            raise AuthenticationFailed("User not found or inactive.")

        claimed_tenant = token.get("tenant_id") or None
        current_tenant = str(user.tenant_id) if user.tenant_id is not None else None
        if claimed_tenant != current_tenant:
            raise AuthenticationFailed("Token tenant does not match the account.")

        if user.tenant is not None and not user.tenant.is_active:
            raise AuthenticationFailed("Tenant is inactive.")

        return user
