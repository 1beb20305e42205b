from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .story import StoryGraph, StoryNode


EMPHASIS_SCALE = 1.3
EMPHASIS_DURATION_MS = 150


@dataclass(frozen=True)
class DetailView:
    node_id: str
    title: str
    body: str


@dataclass(frozen=True)
class Emphasis:
    """Momentary enlargement of the clicked circle; grow then shrink back."""

    node_id: str
    radius: float
    scale: float = EMPHASIS_SCALE
    duration_ms: int = EMPHASIS_DURATION_MS

    @property
    def peak_radius(self) -> float:
        return self.radius * self.scale


def format_title(node: StoryNode) -> str:
    return f"{node.icon} {node.label}"


def format_body(node: StoryNode) -> str:
    return node.description.replace("\\n", "\n")


class DetailModal:
    """Popup describing one story node. Holds only what is currently shown."""

    def __init__(self) -> None:
        self.current: Optional[DetailView] = None
        self.last_emphasis: Optional[Emphasis] = None

    @property
    def visible(self) -> bool:
        return self.current is not None

    def show(self, node: StoryNode) -> DetailView:
        view = DetailView(node_id=node.id, title=format_title(node), body=format_body(node))
        self.current = view
        self.last_emphasis = Emphasis(node_id=node.id, radius=node.radius)
        return view

    def show_by_id(self, graph: StoryGraph, node_id: str) -> DetailView:
        return self.show(graph.require_node(node_id))

    def hide(self) -> None:
        self.current = None


__all__ = ["DetailModal", "DetailView", "Emphasis", "format_title", "format_body"]
