"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via CHATDESK_* env vars
or a YAML file (see yaml_config.py).
"""
from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from .models import RemoteOperation

logger = logging.getLogger(__name__)


# Asks the user a yes/no question.
# Signature: async def confirm(title, text) -> bool
ConfirmCallback = Callable[[str, str], Awaitable[bool]]

# Shows a message the user has to dismiss.
# Signature: async def acknowledge(title, text) -> None
AcknowledgeCallback = Callable[[str, str], Awaitable[None]]

# Moves the view to another destination, e.g. "/login".
NavigateCallback = Callable[[str], None]

LOGIN_ROUTE = "/login"

DEFAULT_ENDPOINTS: dict[str, str] = {
    RemoteOperation.LIST_CONVERSATIONS.value: "/list_conversations",
    RemoteOperation.GET_CONVERSATION.value: "/get_conversation",
    RemoteOperation.START_CONVERSATION.value: "/start_conversation",
    RemoteOperation.CONTINUE_CONVERSATION.value: "/continue_conversation",
    RemoteOperation.DELETE_CONVERSATION.value: "/delete_conversation",
}


def _default_home() -> Path:
    return Path.home() / ".chatdesk"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, value, default)
        return default


@dataclass
class ClientConfig:
    """Chatbot client configuration."""

    # Remote chatbot service
    api_url: str = "http://localhost:8000"
    endpoints: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_ENDPOINTS)
    )
    request_timeout_seconds: float = 15.0

    # Polling
    poll_interval_seconds: float = 5.0
    active_poll_interval_seconds: float = 5.0
    # Delay before the extra list refresh that follows a deletion.
    delete_resync_delay_seconds: float = 2.0

    # Keep the text/attachment of a failed send instead of dropping it.
    # Off by default: input is cleared as soon as the send is attempted.
    restore_input_on_failure: bool = False

    # Identity store (JSON file standing in for browser local storage)
    storage_path: Path = field(default_factory=lambda: _default_home() / "storage.json")

    # Logging
    log_level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: _default_home() / "logs")

    def endpoint_url(self, operation: RemoteOperation) -> str:
        path = self.endpoints.get(operation.value) or DEFAULT_ENDPOINTS[operation.value]
        return f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"

    def validate(self) -> None:
        """Clamp values that would break the pollers back to defaults."""
        if self.poll_interval_seconds <= 0:
            logger.warning(
                "poll_interval_seconds=%s is not positive; using 5.0",
                self.poll_interval_seconds,
            )
            self.poll_interval_seconds = 5.0
        if self.active_poll_interval_seconds <= 0:
            logger.warning(
                "active_poll_interval_seconds=%s is not positive; using 5.0",
                self.active_poll_interval_seconds,
            )
            self.active_poll_interval_seconds = 5.0
        if self.delete_resync_delay_seconds < 0:
            self.delete_resync_delay_seconds = 2.0
        if self.request_timeout_seconds <= 0:
            self.request_timeout_seconds = 15.0
        for key, default in DEFAULT_ENDPOINTS.items():
            if not isinstance(self.endpoints.get(key), str) or not self.endpoints[key]:
                self.endpoints[key] = default

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Load configuration from CHATDESK_* environment variables."""
        chatdesk_vars = {
            k: v for k, v in os.environ.items() if k.startswith("CHATDESK_")
        }
        if chatdesk_vars:
            logger.info(
                "ClientConfig.from_env: CHATDESK_* env overrides: %s",
                ", ".join(sorted(chatdesk_vars)),
            )
        else:
            logger.debug("ClientConfig.from_env: no CHATDESK_* env vars set, using defaults")

        defaults = cls()
        poll_interval = _env_float(
            "CHATDESK_POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds,
        )
        config = cls(
            api_url=os.getenv("CHATDESK_API_URL", defaults.api_url),
            request_timeout_seconds=_env_float(
                "CHATDESK_REQUEST_TIMEOUT_SECONDS",
                defaults.request_timeout_seconds,
            ),
            poll_interval_seconds=poll_interval,
            active_poll_interval_seconds=_env_float(
                "CHATDESK_ACTIVE_POLL_INTERVAL_SECONDS", poll_interval,
            ),
            delete_resync_delay_seconds=_env_float(
                "CHATDESK_DELETE_RESYNC_DELAY_SECONDS",
                defaults.delete_resync_delay_seconds,
            ),
            restore_input_on_failure=_env_flag(
                "CHATDESK_RESTORE_INPUT_ON_FAILURE",
                defaults.restore_input_on_failure,
            ),
            storage_path=Path(
                os.getenv("CHATDESK_STORAGE_PATH") or defaults.storage_path
            ).expanduser(),
            log_level=os.getenv("CHATDESK_LOG_LEVEL", defaults.log_level).upper(),
            log_dir=Path(
                os.getenv("CHATDESK_LOG_DIR") or defaults.log_dir
            ).expanduser(),
        )
        config.validate()
        logger.info(
            "ClientConfig.from_env: api=%s poll=%.1fs active_poll=%.1fs storage=%s",
            config.api_url, config.poll_interval_seconds,
            config.active_poll_interval_seconds, config.storage_path,
        )
        return config
