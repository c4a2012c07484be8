from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests
import urllib3

from plugins.errors import TransportError
from plugins.Plex.model import CatalogItem
from plugins.Plex.navigation import NavigationState
from plugins.Plex.session import TOKEN_PARAM, ServerConfig
from plugins.Plex.translator import translate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class CatalogFetcher:
    """Loads the listing at the current navigation location.

    ``session`` only needs a requests-compatible ``get``; tests pass a fake.
    """

    def __init__(
        self,
        server: ServerConfig,
        navigation: NavigationState,
        session: Optional[Any] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        strict: bool = True,
    ) -> None:
        self.server = server
        self.navigation = navigation
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.strict = strict
        if session is None:
            session = requests.Session()
            session.verify = verify_ssl
        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        self.session = session

    def request_url(self) -> str:
        return self.server.trimmed_base + self.navigation.current_location()

    def load(self) -> List[CatalogItem]:
        self.server.require()
        url = self.request_url()
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url,
                params={TOKEN_PARAM: self.server.token},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

        if not 200 <= response.status_code < 300:
            reason = getattr(response, "reason", "") or ""
            message = f"returned status {response.status_code} {reason}".strip()
            raise TransportError(message, status=response.status_code)

        return translate(response.text, self.server, strict=self.strict)
