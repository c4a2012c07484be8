from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode

from plugins.errors import ConfigurationError
from plugins.Plex.navigation import NavigationState

TOKEN_PARAM = "X-Plex-Token"


@dataclass(frozen=True)
class ServerConfig:
    """Server address and access token, fixed at initialization."""

    base_path: str = ""
    token: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.base_path) and bool(self.token)

    @property
    def trimmed_base(self) -> str:
        return self.base_path.rstrip("/")

    def require(self) -> None:
        if not self.is_complete:
            raise ConfigurationError("plex_server or plex_token settings missing")

    def token_query(self) -> str:
        return urlencode({TOKEN_PARAM: self.token})

    def resource_url(self, path: str) -> str:
        """Fully qualified, token-bearing URL for a server-relative path."""
        return f"{self.trimmed_base}{path}?{self.token_query()}"

    def __repr__(self) -> str:
        # Keep the token out of logs.
        return f"ServerConfig(base_path={self.base_path!r}, token=***)"


@dataclass
class PlexSession:
    """Credentials plus navigation position owned by one plugin instance."""

    server: ServerConfig = field(default_factory=ServerConfig)
    navigation: NavigationState = field(default_factory=NavigationState)
