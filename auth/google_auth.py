"""
Google credential loading.

Credentials come from, in order: a service account key file (when
GOOGLE_SERVICE_ACCOUNT_FILE is set), the stored user token, or a first-time
browser consent through the OAuth client secrets file. Refreshed and newly
granted user tokens are written back to the token file.
"""

import os
import logging
from typing import Any, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from auth.scopes import SCOPES
from core import config

logger = logging.getLogger(__name__)


class GoogleAuthenticationError(Exception):
    """Raised when no usable Google credentials can be obtained."""


def check_client_secrets() -> Optional[str]:
    """
    Check that the OAuth client secrets file exists.

    Returns:
        An error message when it is missing, None otherwise
    """
    if config.GOOGLE_SERVICE_ACCOUNT_FILE:
        return None
    if not os.path.exists(config.GOOGLE_OAUTH_CLIENT_SECRETS):
        return (
            f"OAuth client secrets not found at '{config.GOOGLE_OAUTH_CLIENT_SECRETS}'. "
            "Download them from the Google Cloud Console or set GOOGLE_OAUTH_CLIENT_SECRETS."
        )
    return None


def _save_credentials(credentials: Credentials) -> None:
    try:
        with open(config.GOOGLE_OAUTH_TOKEN_PATH, "w") as token_file:
            token_file.write(credentials.to_json())
        logger.info(f"Saved Google credentials to {config.GOOGLE_OAUTH_TOKEN_PATH}")
    except OSError as e:
        logger.warning(f"Could not save credentials to {config.GOOGLE_OAUTH_TOKEN_PATH}: {e}")


def _load_service_account_credentials(scopes: List[str]) -> Any:
    try:
        return service_account.Credentials.from_service_account_file(
            config.GOOGLE_SERVICE_ACCOUNT_FILE, scopes=scopes
        )
    except (OSError, ValueError) as e:
        raise GoogleAuthenticationError(
            f"Could not load service account key '{config.GOOGLE_SERVICE_ACCOUNT_FILE}': {e}"
        ) from e


def _load_stored_credentials() -> Optional[Credentials]:
    if not os.path.exists(config.GOOGLE_OAUTH_TOKEN_PATH):
        return None
    try:
        return Credentials.from_authorized_user_file(config.GOOGLE_OAUTH_TOKEN_PATH, SCOPES)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable token file {config.GOOGLE_OAUTH_TOKEN_PATH}: {e}")
        return None


def _run_consent_flow() -> Credentials:
    error = check_client_secrets()
    if error:
        raise GoogleAuthenticationError(error)
    logger.info("No valid stored credentials; starting browser authorization")
    flow = InstalledAppFlow.from_client_secrets_file(config.GOOGLE_OAUTH_CLIENT_SECRETS, SCOPES)
    credentials = flow.run_local_server(port=0)
    _save_credentials(credentials)
    return credentials


def get_credentials(scopes: Optional[List[str]] = None) -> Any:
    """
    Return valid credentials for the Docs and Drive APIs.

    Blocking: may refresh a token over the network or wait for browser
    consent. Call it from a worker thread inside async code.

    Args:
        scopes: Scopes a service account should be granted. User tokens are
            always requested with the full SCOPES set so one consent covers
            every tool.

    Raises:
        GoogleAuthenticationError: if no credentials can be obtained
    """
    if config.GOOGLE_SERVICE_ACCOUNT_FILE:
        return _load_service_account_credentials(scopes or SCOPES)

    credentials = _load_stored_credentials()
    if credentials and credentials.valid:
        return credentials

    if credentials and credentials.expired and credentials.refresh_token:
        try:
            credentials.refresh(Request())
            _save_credentials(credentials)
            return credentials
        except RefreshError as e:
            logger.warning(f"Stored credentials could not be refreshed: {e}")

    return _run_consent_flow()
