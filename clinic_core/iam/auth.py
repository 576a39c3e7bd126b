# clinic_core/iam/auth.py

from __future__ import annotations

import logging

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from clinic_core.common import routing
from clinic_core.iam.services.sessions import INVALID_TOKEN_MSG, SessionService

logger = logging.getLogger(__name__)


def _is_public(request) -> bool:
    view = (getattr(request, "parser_context", None) or {}).get("view")
    return view is not None and routing.is_public(request, view)


class BearerSessionAuthentication(JWTAuthentication):
    """
    Authenticate using Authorization: Bearer <access token>.

    simplejwt checks signature, expiry and token type (SIMPLE_JWT["AUTH_TOKEN_CLASSES"]),
    then SessionService.get_subject checks the account and its tenant.

    On public routes a bad token is ignored and the request continues anonymously.
    Anything unexpected while verifying is logged and ends as a 401, never a 500.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except AuthenticationFailed:
            if _is_public(request):
                return None
            raise
        except Exception:
            logger.exception("Authentication crashed on %s %s", request.method, request.path)
            if _is_public(request):
                return None
            raise AuthenticationFailed("Could not verify credentials.")

    def get_validated_token(self, raw_token):
        try:
            return super().get_validated_token(raw_token)
        except InvalidToken:
            raise AuthenticationFailed(INVALID_TOKEN_MSG)

    def get_user(self, validated_token):
        return SessionService.get_subject(validated_token)


def read_access_token(request):
    """
    Validated access token from the Authorization header of a plain Django request,
    or None when there is none or it does not verify. Signature and expiry only;
    the account behind it is not loaded.
    """
    authenticator = BearerSessionAuthentication()
    header = authenticator.get_header(request)
    if header is None:
        return None
    try:
        raw_token = authenticator.get_raw_token(header)
        if raw_token is None:
            return None
        return authenticator.get_validated_token(raw_token)
    except AuthenticationFailed:
        return None
