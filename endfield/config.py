import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union

from dotenv import load_dotenv

from endfield.auth import AccountTokenSource, DirectCredentialSource
from endfield.errors import ConfigError

logger = logging.getLogger(__name__)

CredentialSource = Union[AccountTokenSource, DirectCredentialSource]


@dataclass
class Config:
    sources: List[CredentialSource] = field(default_factory=list)
    discord_webhook: Optional[str] = None
    discord_user: Optional[str] = None
    language: str = "en"
    log_level: str = "INFO"


def _lines(value: Optional[str]) -> List[str]:
    return [line.strip() for line in (value or "").splitlines() if line.strip()]


def parse_direct(entry: str) -> DirectCredentialSource:
    """``cred`` or ``cred,secret``"""
    cred, _, secret = entry.partition(",")
    cred = cred.strip()
    if not cred:
        raise ConfigError(f"ACCOUNT_CRED entry without cred: {entry!r}")
    return DirectCredentialSource(cred=cred, secret=secret.strip())


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Read the run configuration from the environment (and a .env file)

    Args:
        env: Mapping to read instead of os.environ; skips .env loading

    Raises:
        ConfigError: no ACCOUNT_TOKEN or ACCOUNT_CRED entry was supplied
    """
    if env is None:
        load_dotenv()
        env = os.environ

    sources: List[CredentialSource] = [AccountTokenSource(t) for t in _lines(env.get("ACCOUNT_TOKEN"))]
    sources += [parse_direct(entry) for entry in _lines(env.get("ACCOUNT_CRED"))]

    if not sources:
        raise ConfigError(
            "ACCOUNT_TOKEN environment variable is required "
            "(one or more tokens separated by newlines), or ACCOUNT_CRED"
        )

    config = Config(
        sources=sources,
        discord_webhook=(env.get("DISCORD_WEBHOOK") or "").strip() or None,
        discord_user=(env.get("DISCORD_USER") or "").strip() or None,
        language=(env.get("ENDFIELD_LANG") or "en").strip(),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
    )
    logger.debug(f"Loaded {len(sources)} account(s)")
    return config
