import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict
from urllib.parse import quote

from endfield.constants import (
    APP_CODE,
    BASIC_INFO_URL,
    GENERATE_CRED_URL,
    OAUTH_GRANT_URL,
    PLATFORM,
    REFRESH_URL,
    VNAME,
    WEB_ORIGIN,
)
from endfield.errors import HandshakeError, TransportError
from endfield.transport import Transport

logger = logging.getLogger(__name__)


def mask(value: str) -> str:
    if not value:
        return "(empty)"
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


@dataclass(frozen=True)
class SessionCredential:
    """Short-lived session: ``cred`` identifies, ``secret`` keys the signatures."""

    cred: str
    secret: str
    user_id: str = ""


class CredentialExchanger:
    """
    Turns a long-lived ACCOUNT_TOKEN into a SessionCredential.

    Flow:
    1. ACCOUNT_TOKEN → basic info (token validation)
    2. ACCOUNT_TOKEN → OAuth code
    3. OAuth code → cred + secret

    Each step needs the previous one; nothing is retried.
    """

    def __init__(self, transport: Transport, clock: Callable[[], float] = time.time):
        self.transport = transport
        self.clock = clock

    def _call(self, step, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            return self.transport.request(method, url, **kwargs).body
        except TransportError as e:
            raise HandshakeError(step, str(e)) from e

    def validate_token(self, account_token: str) -> Dict[str, Any]:
        """
        Step 1: Validate ACCOUNT_TOKEN against the basic info endpoint

        Returns:
            The ``data`` object of the response (account info)
        """
        if not account_token:
            raise HandshakeError(1, "No account token supplied")

        url = f"{BASIC_INFO_URL}?token={quote(account_token, safe='')}"
        data = self._call(1, "GET", url, headers={"Accept": "application/json"})

        if data.get("status") != 0:
            raise HandshakeError(1, data.get("msg") or str(data))

        logger.debug("✓ Account token accepted")
        return data.get("data") or {}

    def grant_code(self, account_token: str) -> str:
        """
        Step 2: Get OAuth code from ACCOUNT_TOKEN

        Returns:
            OAuth code string
        """
        payload = {
            "token": account_token,
            "appCode": APP_CODE,
            "type": 0
        }
        data = self._call(
            2,
            "POST",
            OAUTH_GRANT_URL,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json"
            }
        )

        code = (data.get("data") or {}).get("code")
        if data.get("status") != 0 or not code:
            raise HandshakeError(2, data.get("msg") or str(data))

        logger.debug("✓ OAuth code obtained")
        return code

    def generate_cred(self, oauth_code: str) -> SessionCredential:
        """
        Step 3: Get cred and secret from OAuth code

        Args:
            oauth_code: OAuth code from step 2
        """
        payload = {
            "code": oauth_code,
            "kind": 1
        }
        data = self._call(
            3,
            "POST",
            GENERATE_CRED_URL,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "platform": PLATFORM,
                "Referer": f"{WEB_ORIGIN}/",
                "Origin": WEB_ORIGIN
            }
        )

        result = data.get("data") or {}
        if data.get("code") != 0 or not result.get("cred"):
            raise HandshakeError(3, data.get("message") or str(data))

        credential = SessionCredential(
            cred=result["cred"],
            secret=result.get("token") or "",
            user_id=str(result.get("userId") or ""),
        )
        logger.debug(f"✓ Cred obtained: {mask(credential.cred)}")
        return credential

    def exchange(self, account_token: str) -> SessionCredential:
        self.validate_token(account_token)
        code = self.grant_code(account_token)
        return self.generate_cred(code)

    def refresh_secret(self, cred: str) -> str:
        """
        Get a fresh signing secret for an existing cred (via /auth/refresh)
        """
        headers = {
            "cred": cred,
            "platform": PLATFORM,
            "vname": VNAME,
            "timestamp": str(int(self.clock())),
            "sk-language": "en"
        }
        data = self._call("refresh", "GET", REFRESH_URL, headers=headers)

        token = (data.get("data") or {}).get("token")
        if data.get("code") != 0 or not token:
            raise HandshakeError("refresh", data.get("message") or str(data))

        logger.debug(f"✓ Sign token obtained: {mask(token)}")
        return str(token)


@dataclass(frozen=True)
class AccountTokenSource:
    """Session from a long-lived ACCOUNT_TOKEN via the three-step exchange."""

    account_token: str

    def session(self, exchanger: CredentialExchanger) -> SessionCredential:
        return exchanger.exchange(self.account_token)

    def __repr__(self) -> str:
        return f"AccountTokenSource({mask(self.account_token)})"


@dataclass(frozen=True)
class DirectCredentialSource:
    """Session from a pre-obtained cred, with or without its secret."""

    cred: str
    secret: str = ""

    def session(self, exchanger: CredentialExchanger) -> SessionCredential:
        secret = self.secret or exchanger.refresh_secret(self.cred)
        return SessionCredential(cred=self.cred, secret=secret)

    def __repr__(self) -> str:
        return f"DirectCredentialSource({mask(self.cred)})"
