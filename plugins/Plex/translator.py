"""Turn Plex XML listings into catalog items."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from enum import Enum
from typing import List, Optional

from plugins.errors import ParseError
from plugins.Plex.model import ArtworkRef, CatalogItem, LocalFile, RemoteUrl
from plugins.Plex.session import ServerConfig

logger = logging.getLogger(__name__)

RESTRICTED_RATING = "R"


class NodeKind(Enum):
    DIRECTORY = "Directory"
    VIDEO = "Video"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["NodeKind"]:
        try:
            return cls(tag)
        except ValueError:
            return None


class MalformedNode(ParseError):
    """A recognized node lacks an attribute it must carry."""

    def __init__(self, tag: str, attribute: str) -> None:
        super().__init__(f"{tag} node is missing required attribute '{attribute}'")
        self.tag = tag
        self.attribute = attribute


def _required(node: ET.Element, attribute: str) -> str:
    value = node.get(attribute)
    if value is None:
        raise MalformedNode(node.tag, attribute)
    return value


def resolve_artwork(node: ET.Element, server: ServerConfig) -> ArtworkRef:
    art = node.get("art")
    if art is not None:
        return RemoteUrl(server.resource_url(art))
    return LocalFile()


def _directory_item(node: ET.Element, server: ServerConfig) -> CatalogItem:
    return CatalogItem(
        name=_required(node, "title"),
        path=_required(node, "key"),
        artwork=resolve_artwork(node, server),
        restricted=False,
        description="",
    )


def _part_key(node: ET.Element) -> str:
    part = next(node.iter("Part"), None)
    if part is None:
        return ""
    return _required(part, "key")


def _video_item(node: ET.Element, server: ServerConfig) -> CatalogItem:
    path = _part_key(node)
    name = _required(node, "title")
    description = _required(node, "summary")
    rating = node.get("contentRating", "")
    return CatalogItem(
        name=name,
        path=path,
        artwork=resolve_artwork(node, server),
        restricted=rating == RESTRICTED_RATING,
        description=description,
    )


def parse_document(markup: str) -> ET.Element:
    try:
        return ET.fromstring(markup)
    except ET.ParseError as exc:
        raise ParseError(f"invalid XML document: {exc}") from exc


def translate(markup: str, server: ServerConfig, strict: bool = True) -> List[CatalogItem]:
    """Walk every node of ``markup`` in document order and collect catalog items.

    ``Directory`` nodes become folders and ``Video`` nodes become media items;
    any other tag is skipped. A recognized node missing a required attribute
    aborts the whole document with ParseError, unless ``strict`` is False, in
    which case that node is logged and left out.
    """
    root = parse_document(markup)
    items: List[CatalogItem] = []
    for node in root.iter():
        kind = NodeKind.from_tag(node.tag)
        if kind is None:
            continue
        try:
            if kind is NodeKind.DIRECTORY:
                items.append(_directory_item(node, server))
            elif kind is NodeKind.VIDEO:
                items.append(_video_item(node, server))
        except MalformedNode as exc:
            if strict:
                raise
            logger.warning("Skipping malformed entry: %s", exc)
    logger.debug("Translated %d catalog items", len(items))
    return items
