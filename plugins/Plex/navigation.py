from __future__ import annotations

from typing import List

ROOT_SEGMENT = "/library/sections"
SEPARATOR = "/"


class NavigationState:
    """Path stack describing the current catalog location.

    Absolute segments (leading ``/``) replace the whole stack, relative ones
    are pushed on top, starting from the root when the stack is empty. The
    stack never shrinks below one segment through ``back``.
    """

    def __init__(self) -> None:
        self.segments: List[str] = []

    def reset(self, root: str = ROOT_SEGMENT) -> None:
        self.segments = [root]

    def descend(self, segment: str) -> None:
        if segment.startswith(SEPARATOR):
            self.segments = [segment]
            return
        if not self.segments:
            self.reset()
        self.segments.append(segment)

    def back(self) -> bool:
        if len(self.segments) > 1:
            self.segments.pop()
        return True

    def current_location(self) -> str:
        if not self.segments:
            return ""
        location = self.segments[0]
        for segment in self.segments[1:]:
            location = location.rstrip(SEPARATOR) + SEPARATOR + segment
        return location

    def __len__(self) -> int:
        return len(self.segments)

    def __repr__(self) -> str:
        return f"NavigationState({self.current_location()!r})"
