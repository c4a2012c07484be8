#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import socketserver
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from plugins.errors import PluginError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartAction:
    """Selection outcome: the host should spawn ``command``."""

    command: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"action": "launch", "command": list(self.command)}


@dataclass(frozen=True)
class LoadAction:
    """Selection outcome: the plugin moved its location, the host should reload."""

    def to_dict(self) -> dict[str, object]:
        return {"action": "load"}


SelectedAction = Union[StartAction, LoadAction]

# Settings are declared as (key, default) pairs; the default carries the type.
SettingDecl = Tuple[str, Any]


def try_get_str(settings: Mapping[str, Any], key: str) -> Optional[str]:
    value = settings.get(key)
    if isinstance(value, str):
        return value
    return None


def try_get_bool(settings: Mapping[str, Any], key: str, default: bool) -> bool:
    value = settings.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
    return default


def try_get_int(settings: Mapping[str, Any], key: str, default: int) -> int:
    value = settings.get(key)
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


class BrowserPlugin(ABC):
    """Base class that centralizes host protocol parsing and server glue.

    Subclasses implement the catalog operations; the host drives them either
    in-process or through the JSON-line protocol served by ``serve``.
    """

    # ---- Protocol helpers (class-level, shared) ----
    METHOD_KEYS = ("method", "message", "type", "command", "action")

    @classmethod
    def extract_method(cls, message: Any) -> Optional[str]:
        if isinstance(message, str):
            return message.strip() or None
        if isinstance(message, dict):
            for key in cls.METHOD_KEYS:
                value = message.get(key)
                if isinstance(value, str) and value:
                    return value
        return None

    @staticmethod
    def extract_str(message: Any, *keys: str) -> Optional[str]:
        if isinstance(message, dict):
            for key in keys:
                value = message.get(key)
                if isinstance(value, str):
                    return value
        return None

    # ---- Host-facing operations ----
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def settings(self) -> List[SettingDecl]:
        pass

    @abstractmethod
    def initialize(self, settings: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def initial_load(self) -> None:
        pass

    @abstractmethod
    def load_items(self) -> Sequence[Any]:
        pass

    @abstractmethod
    def on_selected(self, name: str, path: str) -> SelectedAction:
        pass

    @abstractmethod
    def on_back(self) -> bool:
        pass

    # ---- Message handling ----
    def handle_message(self, incoming: Any) -> Dict[str, Any]:
        method = self.extract_method(incoming)
        if method is None:
            return {"error": "Unknown message"}
        try:
            return self._dispatch(method, incoming)
        except PluginError as exc:
            logger.info("%s failed: %s", method, exc)
            return {"error": str(exc)}
        except Exception as exc:
            logger.exception("Unexpected failure while handling %s", method)
            return {"error": f"Failed to handle {method}: {exc}"}

    def _dispatch(self, method: str, incoming: Any) -> Dict[str, Any]:
        if method == "GetInfo":
            return {"name": self.name(), "settings": self._settings_payload()}
        if method == "GetSettings":
            return {"settings": self._settings_payload()}
        if method == "Initialize":
            raw = incoming.get("settings") if isinstance(incoming, dict) else None
            self.initialize(raw if isinstance(raw, dict) else {})
            return {"ok": True}
        if method == "InitialLoad":
            self.initial_load()
            return {"ok": True}
        if method == "LoadItems":
            return {"objects": [self._item_to_dict(o) for o in self.load_items()]}
        if method == "Selected":
            path = self.extract_str(incoming, "path", "id")
            if path is None:
                return {"error": "Missing path"}
            display_name = self.extract_str(incoming, "name", "title") or ""
            return self.on_selected(display_name, path).to_dict()
        if method == "Back":
            return {"handled": bool(self.on_back())}
        return {"error": "Unknown message"}

    def _settings_payload(self) -> list[dict[str, object]]:
        return [{"key": key, "default": default} for key, default in self.settings()]

    @staticmethod
    def _item_to_dict(obj: Any) -> Any:
        if hasattr(obj, "to_dict") and callable(getattr(obj, "to_dict")):
            return obj.to_dict()
        return obj

    def handle_line(self, line: bytes) -> Optional[Dict[str, Any]]:
        """Answer one raw protocol line; blank lines get no reply."""
        try:
            text = line.decode("utf-8").strip()
            if not text:
                return None
            logger.debug("Incoming: %s", text)
            incoming = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return {"error": "Invalid JSON"}
        return self.handle_message(incoming)

    # ---- Server bootstrap ----
    def serve(self, host: str = "127.0.0.1", port: int = 8890) -> None:
        plugin = self

        class JsonLineHandler(socketserver.StreamRequestHandler):  # type: ignore[misc]
            def handle(self) -> None:  # noqa: D401
                for line in self.rfile:
                    payload = plugin.handle_line(line)
                    if payload is not None:
                        self._send_json(payload)

            def _send_json(self, payload: Dict[str, Any]) -> None:
                data = json.dumps(payload, separators=(",", ":")) + "\n"
                self.wfile.write(data.encode("utf-8"))
                self.wfile.flush()

        # One connection at a time: navigation state must not change mid-fetch.
        class ReusableTCPServer(socketserver.TCPServer):  # type: ignore[misc]
            allow_reuse_address = True

        with ReusableTCPServer((host, port), JsonLineHandler) as server:
            main_module = sys.modules.get("__main__")
            candidate_path: str = getattr(
                main_module, "__file__", sys.argv[0] if sys.argv else __file__
            )
            invoked_path = Path(candidate_path).resolve()
            print(f"Starting {invoked_path}", flush=True)
            print(f"{self.name()} plugin listening on {host}:{port}", flush=True)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                pass
