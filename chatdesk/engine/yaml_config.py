"""YAML configuration loader.

Overlays a YAML file on top of the env-derived ClientConfig. Any
section may be omitted; missing keys keep their env/default value.

Example YAML:
    api:
      url: https://chatbot.example.edu/api
      timeout_seconds: 20
      endpoints:
        list_conversations: /listar_conversaciones
        delete_conversation: /eliminar_conversacion

    polling:
      interval_seconds: 5
      active_interval_seconds: 3
      delete_resync_delay_seconds: 2

    send:
      restore_input_on_failure: false

    storage:
      path: ~/.chatdesk/storage.json

    logging:
      level: DEBUG
      dir: ~/.chatdesk/logs
"""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import yaml

from .config import ClientConfig
from .models import RemoteOperation

logger = logging.getLogger(__name__)

_KNOWN_OPERATIONS = {op.value for op in RemoteOperation}


def discover_config_path(cwd: Path, explicit: str | None = None) -> Path | None:
    """Find the config file to load.

    Order: explicit path, ``.chatdesk/chatdesk.yaml`` under *cwd*, then
    ``chatdesk.yaml`` under *cwd*. Returns None when nothing exists.
    """
    if explicit:
        return Path(explicit).expanduser()
    candidates = [cwd / ".chatdesk" / "chatdesk.yaml", cwd / "chatdesk.yaml"]
    for candidate in candidates:
        if candidate.exists():
            logger.info("Auto-discovered config: %s", candidate)
            return candidate
    logger.debug(
        "No config file found (tried %s); using env/defaults",
        ", ".join(str(c) for c in candidates),
    )
    return None


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        logger.warning("Config section '%s' is not a mapping; ignoring it", name)
        return {}
    return value


def _as_float(section: dict, key: str, default: float) -> float:
    if key not in section:
        return default
    try:
        return float(section[key])
    except (TypeError, ValueError):
        logger.warning("Invalid value for %s=%r; using %s", key, section[key], default)
        return default


def load_yaml_config(
    path: str | Path,
    base: ClientConfig | None = None,
) -> ClientConfig:
    """Load a YAML config file and overlay it on *base*.

    *base* defaults to ``ClientConfig.from_env()``. Raises
    FileNotFoundError / yaml.YAMLError so the caller can decide
    whether a broken config is fatal.
    """
    path = Path(path)
    base = base if base is not None else ClientConfig.from_env()
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error("load_yaml_config: config file not found at %s", path.absolute())
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    if not isinstance(raw, dict):
        logger.warning("load_yaml_config: %s is not a mapping; using defaults", path)
        return base

    logger.info(
        "Parsed YAML config %s — sections: %s",
        path.name, ", ".join(sorted(raw)) if raw else "(empty)",
    )

    # ── API ────────────────────────────────────────────────────
    api = _section(raw, "api")
    endpoints = dict(base.endpoints)
    endpoints_raw = api.get("endpoints") or {}
    if isinstance(endpoints_raw, dict):
        for name, value in endpoints_raw.items():
            if name not in _KNOWN_OPERATIONS:
                logger.warning("Unknown endpoint '%s' in %s; ignoring", name, path)
                continue
            endpoints[name] = str(value)

    # ── Polling / send ─────────────────────────────────────────
    polling = _section(raw, "polling")
    send = _section(raw, "send")
    storage = _section(raw, "storage")
    logging_raw = _section(raw, "logging")

    poll_interval = _as_float(polling, "interval_seconds", base.poll_interval_seconds)
    config = replace(
        base,
        api_url=str(api.get("url", base.api_url)),
        endpoints=endpoints,
        request_timeout_seconds=_as_float(
            api, "timeout_seconds", base.request_timeout_seconds,
        ),
        poll_interval_seconds=poll_interval,
        active_poll_interval_seconds=_as_float(
            polling, "active_interval_seconds",
            poll_interval if "interval_seconds" in polling
            else base.active_poll_interval_seconds,
        ),
        delete_resync_delay_seconds=_as_float(
            polling, "delete_resync_delay_seconds",
            base.delete_resync_delay_seconds,
        ),
        restore_input_on_failure=bool(
            send.get("restore_input_on_failure", base.restore_input_on_failure)
        ),
        storage_path=Path(str(storage.get("path", base.storage_path))).expanduser(),
        log_level=str(logging_raw.get("level", base.log_level)).upper(),
        log_dir=Path(str(logging_raw.get("dir", base.log_dir))).expanduser(),
    )
    config.validate()
    return config
