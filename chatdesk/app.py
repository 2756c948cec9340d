"""chatdesk CLI — main application entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import yaml

from chatdesk.engine.config import ClientConfig
from chatdesk.engine.session_context import store_identity
from chatdesk.engine.yaml_config import discover_config_path, load_yaml_config
from chatdesk.shared.models.session import Session
from chatdesk.shared.services.identity_store import IdentityStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"


def configure_logging(config: ClientConfig, *, stream: bool = False) -> Path:
    """Send log records to a rotating file under ``config.log_dir``.

    The TUI owns the terminal, so a stderr handler is only added for
    the one-shot CLI commands.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "chatdesk.log"

    root = logging.getLogger()
    root.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    root.handlers.clear()
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(
        log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    if stream:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(logging.WARNING)
        root.addHandler(stream_handler)
    return log_file


def load_config(explicit: str | None, cwd: Path | None = None) -> ClientConfig:
    """Environment defaults, overlaid by the discovered YAML file if any."""
    base = ClientConfig.from_env()
    config_path = discover_config_path(cwd or Path.cwd(), explicit)
    if config_path is None:
        return base
    return load_yaml_config(config_path, base)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatdesk",
        description="Terminal client for the chatbot conversation service",
    )
    parser.add_argument(
        "--config", metavar="PATH",
        help="YAML config file (default: .chatdesk/chatdesk.yaml or chatdesk.yaml)",
    )
    parser.add_argument(
        "--login", metavar="USERNAME",
        help="Store the identity records for USERNAME and exit",
    )
    parser.add_argument("--person-id", metavar="ID", default="", help="Person id (with --login)")
    parser.add_argument("--first-name", metavar="NAMES", default="", help="First name(s) (with --login)")
    parser.add_argument(
        "--paternal-surname", metavar="SURNAME", default="",
        help="Paternal surname (with --login)",
    )
    parser.add_argument(
        "--maternal-surname", metavar="SURNAME", default="",
        help="Maternal surname (with --login)",
    )
    parser.add_argument(
        "--logout", action="store_true",
        help="Forget the stored identity and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.login is not None and args.logout:
        parser.error("--login and --logout are mutually exclusive")

    try:
        config = load_config(args.config)
    except FileNotFoundError as exc:
        print(f"Error: config file not found: {exc.filename}", file=sys.stderr)
        sys.exit(2)
    except yaml.YAMLError as exc:
        print(f"Error: invalid YAML config: {exc}", file=sys.stderr)
        sys.exit(2)

    one_shot = args.login is not None or args.logout
    log_file = configure_logging(config, stream=one_shot)
    logger = logging.getLogger(__name__)
    logger.info(
        "Starting chatdesk cwd=%s api=%s config=%s log=%s",
        Path.cwd(), config.api_url, args.config or "<auto>", log_file,
    )

    store = IdentityStore(config.storage_path)

    if args.logout:
        store.clear()
        logger.info("Identity cleared from %s", store.path)
        print("Sesión cerrada.")
        sys.exit(0)

    if args.login is not None:
        username = args.login.strip()
        if not username:
            parser.error("--login needs a non-empty USERNAME")
        session = Session(
            person_id=args.person_id,
            first_name=args.first_name,
            paternal_surname=args.paternal_surname,
            maternal_surname=args.maternal_surname,
            username=username,
        )
        store_identity(store, session)
        logger.info("Identity stored for %s at %s", username, store.path)
        print(f"Sesión guardada para {session.full_name or username}.")
        sys.exit(0)

    # TUI mode
    from chatdesk.tui.app import ChatdeskApp

    app = ChatdeskApp(config, store)
    app.run()


if __name__ == "__main__":
    main()
