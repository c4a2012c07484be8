#!/usr/bin/env python3
"""
Tests for the host-facing Plex plugin and its JSON-line message handling.
"""
import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from plugins.base import LoadAction, StartAction, try_get_bool, try_get_int, try_get_str
from plugins.errors import ConfigurationError, TransportError
from plugins.Plex.dispatcher import SystemOpener
from plugins.Plex.provider import PlexPlugin, read_config

SECTIONS = """<MediaContainer>
  <Directory key="1" title="Movies" art="/:/resources/movie-fanart.jpg" />
  <Directory key="2" title="TV Shows" />
</MediaContainer>"""

MOVIES = """<MediaContainer>
  <Video title="Alien" summary="In space." contentRating="R">
    <Media><Part key="/library/parts/7/file.mkv" /></Media>
  </Video>
</MediaContainer>"""

SETTINGS = {"plex_server": "http://plex.local:32400/", "plex_token": "abc123"}


class FakeResponse:
    def __init__(self, status_code=200, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason


class RoutingSession:
    """Serves canned bodies keyed by request URL."""

    def __init__(self, pages):
        self.pages = pages
        self.urls = []

    def get(self, url, params=None, timeout=None):
        self.urls.append(url)
        if url not in self.pages:
            return FakeResponse(404, "", "Not Found")
        return FakeResponse(200, self.pages[url])


def _plugin(session=None):
    session = session or RoutingSession({
        "http://plex.local:32400/library/sections": SECTIONS,
        "http://plex.local:32400/library/sections/1": MOVIES,
    })
    plugin = PlexPlugin(opener=SystemOpener("linux"), session=session)
    return plugin, session


def test_name_and_declared_settings():
    plugin, _ = _plugin()
    keys = [key for key, _ in plugin.settings()]

    assert plugin.name() == "Plex"
    assert keys[:2] == ["plex_server", "plex_token"]
    assert "plex_verify_ssl" in keys


@pytest.mark.parametrize(
    "settings, message",
    [
        ({"plex_token": "abc"}, "plex_server setting is required"),
        ({"plex_server": "http://plex"}, "plex_token setting is required"),
        ({"plex_server": "http://plex", "plex_token": 123}, "plex_token setting is required"),
    ],
)
def test_initialize_requires_server_and_token(settings, message):
    plugin, _ = _plugin()

    with pytest.raises(ConfigurationError) as excinfo:
        plugin.initialize(settings)
    assert str(excinfo.value) == message


def test_load_before_initialize_is_configuration_error():
    plugin, session = _plugin()
    plugin.initial_load()

    with pytest.raises(ConfigurationError):
        plugin.load_items()
    assert session.urls == []


def test_browse_descend_launch_and_back():
    plugin, session = _plugin()
    plugin.initialize(SETTINGS)
    plugin.initial_load()

    sections = plugin.load_items()
    assert [i.name for i in sections] == ["Movies", "TV Shows"]

    assert plugin.on_selected("Movies", sections[0].path) == LoadAction()
    movies = plugin.load_items()
    assert session.urls[-1] == "http://plex.local:32400/library/sections/1"
    assert movies[0].restricted is True

    action = plugin.on_selected("Alien", movies[0].path)
    assert action == StartAction(
        ["xdg-open", "http://plex.local:32400/library/parts/7/file.mkv?X-Plex-Token=abc123"]
    )
    assert plugin.plex.navigation.current_location() == "/library/sections/1"

    assert plugin.on_back() is True
    assert plugin.plex.navigation.current_location() == "/library/sections"
    assert plugin.on_back() is True
    assert plugin.plex.navigation.current_location() == "/library/sections"


def test_descend_to_missing_location_reports_status():
    plugin, _ = _plugin()
    plugin.initialize(SETTINGS)
    plugin.initial_load()
    plugin.on_selected("TV Shows", "2")

    with pytest.raises(TransportError) as excinfo:
        plugin.load_items()
    assert excinfo.value.status == 404


def test_initial_load_resets_navigation():
    plugin, _ = _plugin()
    plugin.initialize(SETTINGS)
    plugin.on_selected("x", "/library/metadata/1/children")
    plugin.initial_load()
    assert plugin.plex.navigation.current_location() == "/library/sections"


def test_handle_message_round_trip():
    plugin, _ = _plugin()

    assert plugin.handle_message("GetInfo")["name"] == "Plex"
    assert plugin.handle_message({"method": "Initialize", "settings": SETTINGS}) == {"ok": True}
    assert plugin.handle_message({"method": "InitialLoad"}) == {"ok": True}

    listing = plugin.handle_message({"method": "LoadItems"})
    assert listing["objects"][0] == {
        "name": "Movies",
        "path": "1",
        "artwork": {
            "class": "RemoteUrl",
            "value": "http://plex.local:32400/:/resources/movie-fanart.jpg?X-Plex-Token=abc123",
        },
        "restricted": False,
        "description": "",
    }
    assert listing["objects"][1]["artwork"] == {"class": "LocalFile", "value": "./folder.jpg"}

    assert plugin.handle_message({"method": "Selected", "name": "Movies", "path": "1"}) == {"action": "load"}
    launched = plugin.handle_message({"method": "Selected", "path": "/library/parts/7/file.mkv"})
    assert launched["action"] == "launch"
    assert launched["command"][0] == "xdg-open"
    assert plugin.handle_message({"method": "Back"}) == {"handled": True}


def test_handle_message_reports_errors():
    plugin, _ = _plugin()

    assert plugin.handle_message({"method": "LoadItems"}) == {
        "error": "plex_server or plex_token settings missing"
    }
    assert plugin.handle_message({"method": "Initialize", "settings": {}}) == {
        "error": "plex_server setting is required"
    }
    assert plugin.handle_message({"method": "Selected"}) == {"error": "Missing path"}
    assert plugin.handle_message({"method": "Bogus"}) == {"error": "Unknown message"}
    assert plugin.handle_message(42) == {"error": "Unknown message"}


def test_handle_message_wraps_unexpected_failures():
    plugin, _ = _plugin()

    def explode():
        raise RuntimeError("kaboom")

    plugin.load_items = explode
    assert plugin.handle_message({"method": "LoadItems"}) == {
        "error": "Failed to handle LoadItems: kaboom"
    }


def test_optional_settings_reach_fetcher():
    plugin, _ = _plugin()
    plugin.initialize(dict(SETTINGS, plex_timeout="5", plex_strict="false"))

    assert plugin.fetcher.timeout == 5
    assert plugin.fetcher.strict is False


def test_setting_helpers():
    assert try_get_str({"a": "x"}, "a") == "x"
    assert try_get_str({"a": 1}, "a") is None
    assert try_get_bool({"a": "yes"}, "a", False) is True
    assert try_get_bool({"a": "off"}, "a", True) is False
    assert try_get_bool({}, "a", True) is True
    assert try_get_int({"a": "12"}, "a", 1) == 12
    assert try_get_int({"a": "twelve"}, "a", 1) == 1
    assert try_get_int({"a": True}, "a", 1) == 1


def test_read_config(tmp_path):
    config_file = tmp_path / "config.dat"
    config_file.write_text(
        "# Plex server\n"
        'plex_server="http://plex.local:32400"\n'
        "\n"
        "plex_token = 'abc123'\n"
        "garbage line\n"
    )

    assert read_config(str(config_file)) == {
        "plex_server": "http://plex.local:32400",
        "plex_token": "abc123",
    }


def test_selecting_media_without_part_keeps_location():
    plugin, _ = _plugin()
    plugin.initialize(SETTINGS)
    plugin.initial_load()
    plugin.on_selected("Movies", "1")

    assert plugin.on_selected("Untitled", "") == LoadAction()
    assert plugin.plex.navigation.segments == ["/library/sections", "1"]
    assert plugin.plex.navigation.current_location() == "/library/sections/1"


def test_handle_line_answers_undecodable_input():
    plugin, _ = _plugin()

    assert plugin.handle_line(b'{"method":"\xff"}\n') == {"error": "Invalid JSON"}
    assert plugin.handle_line(b"{not json\n") == {"error": "Invalid JSON"}
    assert plugin.handle_line(b"   \n") is None
    assert plugin.handle_line(b'{"method":"GetInfo"}\n')["name"] == "Plex"
