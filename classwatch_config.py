"""
Configuration for ClassWatch

config.json holds the portal/term/notification settings, secrets come from the
environment (.env is loaded through python-dotenv). Both are read once at
process start and handed to each component explicitly.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

from dotenv import load_dotenv

from classwatch_errors import AuthenticationError, ConfigurationError
from shared_utils import load_json_file

logger = logging.getLogger(__name__)

# Values shipped in the example .env that must never be used for a real login
PLACEHOLDER_USERNAMES = ('your_netid', 'UNDEFINED')


@dataclass
class EmailSettings:
    enabled: bool = False
    sender: str = ''
    recipient: str = ''


@dataclass
class Timeouts:
    session_probe_ms: int = 15000
    device_confirmation_ms: int = 30000
    login_landmark_ms: int = 60000
    settle_ms: int = 5000


@dataclass
class AppConfig:
    portal_url: str
    term: str
    email: EmailSettings = field(default_factory=EmailSettings)
    notify_on_any_change: bool = False
    headless: bool = False
    status_file: str = 'last-status.json'
    session_file: str = os.path.join('data', 'session', 'storage-state.json')
    screenshot_dir: str = 'screenshots'
    timeouts: Timeouts = field(default_factory=Timeouts)


@dataclass
class Credentials:
    username: str
    password: str
    resend_api_key: Optional[str] = None

    def validate(self):
        """Fail fast on credentials that cannot possibly log in"""
        if not self.username or self.username in PLACEHOLDER_USERNAMES:
            raise AuthenticationError(
                "PORTAL_USERNAME is missing or still the placeholder value. Edit .env with your real FSUID.")
        if not self.password:
            raise AuthenticationError("PORTAL_PASSWORD is missing. Edit .env with your portal password.")


def _timeouts_from(raw: Dict) -> Timeouts:
    defaults = Timeouts()
    try:
        return Timeouts(
            session_probe_ms=int(raw.get('sessionProbeMs', defaults.session_probe_ms)),
            device_confirmation_ms=int(raw.get('deviceConfirmationMs', defaults.device_confirmation_ms)),
            login_landmark_ms=int(raw.get('loginLandmarkMs', defaults.login_landmark_ms)),
            settle_ms=int(raw.get('settleMs', defaults.settle_ms)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid timeouts in config: {e}") from e


def parse_config(raw: Dict) -> AppConfig:
    """Build an AppConfig from the camelCase config.json document"""
    if not isinstance(raw, dict):
        raise ConfigurationError("Config must be a JSON object")
    missing = [key for key in ('portalUrl', 'term') if not raw.get(key)]
    if missing:
        raise ConfigurationError(f"Config is missing required keys: {', '.join(missing)}")

    email_raw = (raw.get('notification') or {}).get('email') or {}
    email = EmailSettings(
        enabled=bool(email_raw.get('enabled', False)),
        sender=email_raw.get('from', ''),
        recipient=email_raw.get('to', ''),
    )
    if email.enabled and not (email.sender and email.recipient):
        raise ConfigurationError("notification.email needs both 'from' and 'to' when enabled")

    defaults = AppConfig(portal_url=raw['portalUrl'], term=raw['term'])
    return AppConfig(
        portal_url=raw['portalUrl'],
        term=raw['term'],
        email=email,
        notify_on_any_change=bool(raw.get('notifyOnAnyChange', False)),
        headless=bool(raw.get('headless', False)),
        status_file=raw.get('statusFile', defaults.status_file),
        session_file=raw.get('sessionFile', defaults.session_file),
        screenshot_dir=raw.get('screenshotDir', defaults.screenshot_dir),
        timeouts=_timeouts_from(raw.get('timeouts') or {}),
    )


def load_config(path: str = 'config.json') -> AppConfig:
    try:
        raw = load_json_file(path)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e
    if raw is None:
        raise ConfigurationError(f"Config file {path} not found. Copy config.example.json to {path} and edit it.")
    config = parse_config(raw)
    logger.debug(f"Loaded config from {path}: portal={config.portal_url} term={config.term}")
    return config


def load_credentials() -> Credentials:
    load_dotenv()
    return Credentials(
        username=os.getenv('PORTAL_USERNAME', '').strip(),
        password=os.getenv('PORTAL_PASSWORD', ''),
        resend_api_key=os.getenv('RESEND_API_KEY', '').strip() or None,
    )
