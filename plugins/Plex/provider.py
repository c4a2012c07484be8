#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

# Allow running this file directly: add project root to sys.path
_THIS = Path(__file__).resolve()
_PLUGINS_DIR = _THIS.parent.parent
_PROJECT_ROOT = _PLUGINS_DIR.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from plugins.base import (
    BrowserPlugin,
    LoadAction,
    SelectedAction,
    SettingDecl,
    StartAction,
    try_get_bool,
    try_get_int,
    try_get_str,
)
from plugins.errors import ConfigurationError
from plugins.Plex.dispatcher import Launch, SystemOpener, decide
from plugins.Plex.fetcher import DEFAULT_TIMEOUT, CatalogFetcher
from plugins.Plex.model import CatalogItem
from plugins.Plex.session import PlexSession, ServerConfig

logger = logging.getLogger(__name__)

SERVER_SETTING = "plex_server"
TOKEN_SETTING = "plex_token"
VERIFY_SSL_SETTING = "plex_verify_ssl"
TIMEOUT_SETTING = "plex_timeout"
STRICT_SETTING = "plex_strict"


def read_config(config_file: str = "./config.dat") -> Dict[str, str]:
    """Read configuration from key/value pair file."""
    config = {}
    config_path = Path(config_file)
    if not config_path.is_absolute():
        # Resolve relative to current working directory, not project root
        config_path = config_path.resolve()

    with open(config_path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            # Remove quotes if present
            value = value.strip().strip('"').strip("'")
            config[key.strip()] = value
    return config


class PlexPlugin(BrowserPlugin):
    """Browses a Plex server's library sections, folders and videos."""

    def __init__(self, opener: Optional[SystemOpener] = None, session: Optional[Any] = None) -> None:
        self.plex = PlexSession()
        self.opener = opener or SystemOpener()
        self._http_session = session
        self.fetcher: Optional[CatalogFetcher] = None

    def name(self) -> str:
        return "Plex"

    def settings(self) -> List[SettingDecl]:
        return [
            (SERVER_SETTING, ""),
            (TOKEN_SETTING, ""),
            (VERIFY_SSL_SETTING, True),
            (TIMEOUT_SETTING, DEFAULT_TIMEOUT),
            (STRICT_SETTING, True),
        ]

    def initialize(self, settings: Mapping[str, Any]) -> None:
        base_path = try_get_str(settings, SERVER_SETTING)
        if base_path is None:
            raise ConfigurationError(f"{SERVER_SETTING} setting is required")
        token = try_get_str(settings, TOKEN_SETTING)
        if token is None:
            raise ConfigurationError(f"{TOKEN_SETTING} setting is required")

        self.plex.server = ServerConfig(base_path=base_path, token=token)
        self.fetcher = CatalogFetcher(
            self.plex.server,
            self.plex.navigation,
            self._http_session,
            timeout=try_get_int(settings, TIMEOUT_SETTING, DEFAULT_TIMEOUT),
            verify_ssl=try_get_bool(settings, VERIFY_SSL_SETTING, True),
            strict=try_get_bool(settings, STRICT_SETTING, True),
        )
        logger.info("Initialized for %s", self.plex.server.trimmed_base)

    def initial_load(self) -> None:
        self.plex.navigation.reset()

    def load_items(self) -> List[CatalogItem]:
        if self.fetcher is None:
            raise ConfigurationError("plex_server or plex_token settings missing")
        items = self.fetcher.load()
        logger.debug("Loaded %d items at %s", len(items), self.plex.navigation.current_location())
        return items

    def on_selected(self, name: str, path: str) -> SelectedAction:
        decision = decide(path, self.plex.server)
        if isinstance(decision, Launch):
            logger.info("Launching %s", name or path)
            return StartAction(self.opener.command_for(decision.url))
        if path:
            self.plex.navigation.descend(path)
        return LoadAction()

    def on_back(self) -> bool:
        return self.plex.navigation.back()


def main() -> None:
    parser = argparse.ArgumentParser(description="Plex Catalog Browser Plugin")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8890, help="Port to bind (default: 8890)")
    parser.add_argument("--config", default="./config.dat", help="Path to config file (default: ./config.dat)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = read_config(args.config)
    except OSError as exc:
        print(f"Error: cannot read {args.config}: {exc}", file=sys.stderr)
        sys.exit(1)

    plugin = PlexPlugin()
    try:
        plugin.initialize(config)
    except ConfigurationError as exc:
        print(f"Error: {exc} (in {args.config})", file=sys.stderr)
        sys.exit(1)
    plugin.initial_load()
    plugin.serve(args.host, args.port)


if __name__ == "__main__":
    main()
