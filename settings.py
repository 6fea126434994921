"""Configuration loaded from environment variables."""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


class ConfigurationError(Exception):
    """Raised when a required setting is missing or invalid."""


@dataclass(frozen=True)
class GatewayCredentials:
    """Account and application key for the choreo gateway."""
    account_name: str
    app_key_name: str
    app_key: str


@dataclass(frozen=True)
class GoogleCredentials:
    """OAuth 2.0 credentials for Google Calendar."""
    client_id: str = ''
    client_secret: str = ''
    access_token: str = ''
    refresh_token: str = ''


@dataclass(frozen=True)
class GoogleDocsCredentials:
    username: str = ''
    password: str = ''


@dataclass(frozen=True)
class OAuth1Credentials:
    """OAuth 1.0a consumer and access token pair (Dropbox, Fitbit, Twitter)."""
    consumer_key: str = ''
    consumer_secret: str = ''
    access_token: str = ''
    access_token_secret: str = ''


@dataclass(frozen=True)
class Settings:
    """All settings for one run, passed explicitly into each pipeline."""
    gateway: GatewayCredentials
    lastfm_api_key: str = ''
    google: GoogleCredentials = field(default_factory=GoogleCredentials)
    calendar_name: str = 'MyConcerts'
    google_docs: GoogleDocsCredentials = field(default_factory=GoogleDocsCredentials)
    dropbox: OAuth1Credentials = field(default_factory=OAuth1Credentials)
    dropbox_backup_folder: str = 'GoogleDocBackups'
    fitbit: OAuth1Credentials = field(default_factory=OAuth1Credentials)
    twitter: OAuth1Credentials = field(default_factory=OAuth1Credentials)
    step_benchmark: int = 10000
    goal_met_message: str = 'Iron Man triathalon, here I come!'
    goal_not_met_message: str = 'Today I was a couch potato. Sigh.'
    timeout_seconds: int = 30
    log_level: str = 'INFO'


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Populated Settings instance

    Raises:
        ConfigurationError: If gateway credentials are missing or a numeric
            setting is not an integer
    """
    env = os.environ if environ is None else environ

    def get(name: str, default: str = '') -> str:
        return env.get(name, default).strip()

    gateway = GatewayCredentials(
        account_name=get('TEMBOO_ACCOUNT_NAME'),
        app_key_name=get('TEMBOO_APP_KEY_NAME'),
        app_key=get('TEMBOO_APP_KEY')
    )
    missing = [
        name for name, value in (
            ('TEMBOO_ACCOUNT_NAME', gateway.account_name),
            ('TEMBOO_APP_KEY_NAME', gateway.app_key_name),
            ('TEMBOO_APP_KEY', gateway.app_key),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)}"
        )

    return Settings(
        gateway=gateway,
        lastfm_api_key=get('LASTFM_API_KEY'),
        google=GoogleCredentials(
            client_id=get('GOOGLE_CLIENT_ID'),
            client_secret=get('GOOGLE_CLIENT_SECRET'),
            access_token=get('GOOGLE_ACCESS_TOKEN'),
            refresh_token=get('GOOGLE_REFRESH_TOKEN')
        ),
        calendar_name=get('CALENDAR_NAME', 'MyConcerts'),
        google_docs=GoogleDocsCredentials(
            username=get('GOOGLEDOCS_USERNAME'),
            password=get('GOOGLEDOCS_PASSWORD')
        ),
        dropbox=OAuth1Credentials(
            consumer_key=get('DROPBOX_APP_KEY'),
            consumer_secret=get('DROPBOX_APP_SECRET'),
            access_token=get('DROPBOX_ACCESS_TOKEN'),
            access_token_secret=get('DROPBOX_ACCESS_TOKEN_SECRET')
        ),
        dropbox_backup_folder=get('DROPBOX_BACKUP_FOLDER', 'GoogleDocBackups'),
        fitbit=OAuth1Credentials(
            consumer_key=get('FITBIT_CONSUMER_KEY'),
            consumer_secret=get('FITBIT_CONSUMER_SECRET'),
            access_token=get('FITBIT_ACCESS_TOKEN'),
            access_token_secret=get('FITBIT_ACCESS_TOKEN_SECRET')
        ),
        twitter=OAuth1Credentials(
            consumer_key=get('TWITTER_CONSUMER_KEY'),
            consumer_secret=get('TWITTER_CONSUMER_SECRET'),
            access_token=get('TWITTER_ACCESS_TOKEN'),
            access_token_secret=get('TWITTER_ACCESS_TOKEN_SECRET')
        ),
        step_benchmark=_get_int(env, 'STEP_BENCHMARK', 10000),
        goal_met_message=get('GOAL_MET_MESSAGE', Settings.goal_met_message),
        goal_not_met_message=get('GOAL_NOT_MET_MESSAGE', Settings.goal_not_met_message),
        timeout_seconds=_get_int(env, 'TIMEOUT_SECONDS', 30),
        log_level=get('LOG_LEVEL', 'INFO')
    )


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
