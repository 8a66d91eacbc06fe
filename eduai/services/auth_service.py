from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Dict

import boto3
from botocore.exceptions import ClientError

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

AUTH_FLOW = "USER_PASSWORD_AUTH"


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "NotAuthorizedException"
    USER_NOT_FOUND = "UserNotFoundException"
    USER_NOT_CONFIRMED = "UserNotConfirmedException"
    INVALID_PARAMETER = "InvalidParameterException"
    TOO_MANY_REQUESTS = "TooManyRequestsException"
    POOL_NOT_FOUND = "ResourceNotFoundException"
    UNKNOWN = "Unknown"


AUTH_ERROR_MESSAGES: Dict[AuthErrorKind, str] = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorKind.USER_NOT_FOUND: "User not found",
    AuthErrorKind.USER_NOT_CONFIRMED: "Please verify your email",
    AuthErrorKind.INVALID_PARAMETER: "Invalid request parameters",
    AuthErrorKind.TOO_MANY_REQUESTS: "Too many login attempts. Please try again later",
    AuthErrorKind.POOL_NOT_FOUND: "User pool not found. Please contact support",
    AuthErrorKind.UNKNOWN: "Authentication failed",
}


def classify_auth_error(code: str | None) -> AuthErrorKind:
    try:
        return AuthErrorKind(code)
    except ValueError:
        return AuthErrorKind.UNKNOWN


class AuthenticationError(Exception):
    def __init__(self, kind: AuthErrorKind):
        self.kind = kind
        super().__init__(AUTH_ERROR_MESSAGES[kind])

    @property
    def message(self) -> str:
        return AUTH_ERROR_MESSAGES[self.kind]


class AuthConfigurationError(RuntimeError):
    """COGNITO_CLIENT_ID is not configured."""


class AuthService:
    """
    Password login against a Cognito user pool.
    """

    def __init__(self, client=None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client = client or boto3.client("cognito-idp", region_name=self.settings.aws_region)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Runs the USER_PASSWORD_AUTH flow and returns the issued tokens.
        Raises AuthenticationError for any Cognito failure.
        """
        client_id = self.settings.cognito_client_id
        if not client_id:
            raise AuthConfigurationError("Missing COGNITO_CLIENT_ID environment variable")

        logger.info("Attempting authentication for %s", email)
        try:
            response = self.client.initiate_auth(
                AuthFlow=AUTH_FLOW,
                ClientId=client_id,
                AuthParameters={"USERNAME": email, "PASSWORD": password},
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            logger.warning("Cognito rejected login for %s: %s", email, code)
            raise AuthenticationError(classify_auth_error(code)) from e
        except Exception as e:
            logger.exception("Cognito call failed for %s", email)
            raise AuthenticationError(AuthErrorKind.UNKNOWN) from e

        result = response.get("AuthenticationResult") or {}
        return {
            "idToken": result.get("IdToken"),
            "accessToken": result.get("AccessToken"),
            "refreshToken": result.get("RefreshToken"),
            "expiresIn": result.get("ExpiresIn"),
            "email": email,
        }


@lru_cache()
def get_auth_service() -> AuthService:
    """One shared service (and Cognito client) per process."""
    return AuthService()
