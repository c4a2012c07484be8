from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

DEFAULT_ARTWORK = "./folder.jpg"


@dataclass(frozen=True)
class ArtworkRef:
    """Pointer to cover imagery for a catalog item."""

    value: str

    @property
    def class_name(self) -> str:
        return "ArtworkRef"

    def to_dict(self) -> dict[str, object]:
        return {"class": self.class_name, "value": self.value}

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "ArtworkRef":
        value = payload.get("value")
        value = value if isinstance(value, str) else ""
        if payload.get("class") == "RemoteUrl":
            return RemoteUrl(value)
        return LocalFile(value or DEFAULT_ARTWORK)


@dataclass(frozen=True)
class RemoteUrl(ArtworkRef):
    """Fully qualified, token-bearing URL on the server."""

    @property
    def class_name(self) -> str:  # noqa: D401
        return "RemoteUrl"


@dataclass(frozen=True)
class LocalFile(ArtworkRef):
    """Placeholder image shipped with the host."""

    value: str = DEFAULT_ARTWORK

    @property
    def class_name(self) -> str:  # noqa: D401
        return "LocalFile"


@dataclass
class CatalogItem:
    """One entry of a catalog listing, either a folder or a media item.

    ``path`` is the resource key the host hands back on selection: the
    folder key for directories, the playable part key for media (empty
    when the server lists media without a part).
    """

    name: str
    path: str
    artwork: ArtworkRef = field(default_factory=LocalFile)
    restricted: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "path": self.path,
            "artwork": self.artwork.to_dict(),
            "restricted": bool(self.restricted),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CatalogItem":
        """Build a CatalogItem from a dict produced by to_dict()."""
        artwork = payload.get("artwork")
        return cls(
            name=str(payload.get("name", "")),
            path=str(payload.get("path", "")),
            artwork=ArtworkRef.from_dict(artwork) if isinstance(artwork, dict) else LocalFile(),
            restricted=bool(payload.get("restricted", False)),
            description=str(payload.get("description", "")),
        )
