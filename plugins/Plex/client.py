#!/usr/bin/env python3
"""Minimal terminal host for the Plex plugin's JSON-line protocol."""
import argparse
import json
import socket
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

_THIS = Path(__file__).resolve()
_PROJECT_ROOT = _THIS.parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from plugins.Plex.dispatcher import spawn
from plugins.Plex.model import CatalogItem

PLUGIN_HOST = "127.0.0.1"
PLUGIN_PORT = 8890


def _request(payload: Dict[str, Any], host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    message = json.dumps(payload, separators=(",", ":")) + "\n"

    with socket.create_connection((host, port), timeout=30) as s:
        s.sendall(message.encode("utf-8"))
        # Read one line response
        buf = b""
        while not buf.endswith(b"\n"):
            chunk = s.recv(16384)
            if not chunk:
                break
            buf += chunk

    text = buf.decode("utf-8").strip()
    return json.loads(text) if text else {}


def request_get_info(host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    return _request({"method": "GetInfo"}, host, port)


def request_initial_load(host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    return _request({"method": "InitialLoad"}, host, port)


def request_load_items(host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    return _request({"method": "LoadItems"}, host, port)


def request_selected(name: str, path: str, host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    return _request({"method": "Selected", "name": name, "path": path}, host, port)


def request_back(host: str = PLUGIN_HOST, port: int = PLUGIN_PORT) -> Dict[str, Any]:
    return _request({"method": "Back"}, host, port)


def to_typed_items(response: Dict[str, Any]) -> List[CatalogItem]:
    raw = response.get("objects") if isinstance(response, dict) else None
    if not isinstance(raw, list):
        return []
    return [CatalogItem.from_dict(obj) for obj in raw if isinstance(obj, dict)]


def format_item(index: int, item: CatalogItem) -> str:
    marker = " [R]" if item.restricted else ""
    line = f"{index:3}. {item.name}{marker}"
    if item.description:
        summary = item.description if len(item.description) <= 60 else item.description[:60] + "..."
        line += f" - {summary}"
    return line


def run_launch(response: Dict[str, Any]) -> bool:
    command = response.get("command")
    if not isinstance(command, list):
        return False
    return spawn([str(part) for part in command])


def browse(host: str, port: int, choose: Optional[Any] = None) -> None:
    """Interactive loop: list, pick a number to open, 'b' for back, 'q' to quit."""
    choose = choose or input
    request_initial_load(host, port)
    while True:
        response = request_load_items(host, port)
        if "error" in response:
            print(f"Error: {response['error']}")
            items: List[CatalogItem] = []
        else:
            items = to_typed_items(response)
            for idx, item in enumerate(items, 1):
                print(format_item(idx, item))

        answer = str(choose("> ")).strip().lower()
        if answer in ("q", "quit"):
            return
        if answer in ("b", "back"):
            request_back(host, port)
            continue
        try:
            item = items[int(answer) - 1]
        except (ValueError, IndexError):
            print("Pick an item number, 'b' or 'q'")
            continue
        outcome = request_selected(item.name, item.path, host, port)
        if outcome.get("action") == "launch":
            run_launch(outcome)
        elif "error" in outcome:
            print(f"Error: {outcome['error']}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal host for the Plex plugin")
    parser.add_argument("--host", default=PLUGIN_HOST, help="Plugin host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=PLUGIN_PORT, help="Plugin port (default: 8890)")
    args = parser.parse_args()

    info = request_get_info(args.host, args.port)
    print(f"Connected to {info.get('name', 'plugin')} on {args.host}:{args.port}")
    try:
        browse(args.host, args.port)
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()
