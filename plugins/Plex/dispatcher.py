from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Union

from plugins.Plex.session import ServerConfig

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "/library/parts"


@dataclass(frozen=True)
class Launch:
    """Selected entry is playable; ``url`` is what the OS should open."""

    url: str


@dataclass(frozen=True)
class Descend:
    """Selected entry is browsable; navigate into it and reload."""


Decision = Union[Launch, Descend]


def decide(selected_path: str, server: ServerConfig) -> Decision:
    if selected_path.startswith(MEDIA_PREFIX):
        return Launch(server.resource_url(selected_path))
    return Descend()


class SystemOpener:
    """Opens a URL or file with the platform's default handler."""

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    @property
    def executable(self) -> str:
        if self.platform.startswith("win"):
            return "explorer"
        if self.platform == "darwin":
            return "open"
        return "xdg-open"

    def command_for(self, url: str) -> List[str]:
        return [self.executable, url]

    def open(self, url: str) -> bool:
        return spawn(self.command_for(url))


def spawn(args: List[str]) -> bool:
    """Start an external command without waiting for it."""
    if not args:
        return False
    try:
        subprocess.Popen(args)
    except OSError as exc:
        logger.error("Could not run %s: %s", args[0], exc)
        return False
    return True
