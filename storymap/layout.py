from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, NamedTuple, Protocol, Sequence

import networkx as nx

from .story import NodeType, StoryLink, StoryNode


logger = logging.getLogger(__name__)


class Position(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class LayoutConstraints:
    """Viewport and force settings shared by the server layout and the browser simulation."""

    width: float = 960
    height: float = 640
    link_distance: float = 150
    charge_strength: float = -500
    collide_padding: float = 15
    collide_iterations: int = 2
    reheat_alpha: float = 0.3

    @property
    def center(self) -> Position:
        return Position(self.width / 2, self.height / 2)

    def resized(self, width: float, height: float) -> "LayoutConstraints":
        return replace(self, width=width, height=height)


class LayoutProvider(Protocol):
    def compute(
        self,
        nodes: Sequence[StoryNode],
        links: Sequence[StoryLink],
        constraints: LayoutConstraints,
    ) -> Dict[str, Position]: ...


class SpringLayout:
    """Fruchterman-Reingold placement from networkx, seeded so reruns look the same."""

    def __init__(self, seed: int | None = 7, iterations: int = 100, fill: float = 0.4) -> None:
        self.seed = seed
        self.iterations = iterations
        self.fill = fill

    def compute(
        self,
        nodes: Sequence[StoryNode],
        links: Sequence[StoryLink],
        constraints: LayoutConstraints,
    ) -> Dict[str, Position]:
        graph = nx.Graph()
        graph.add_nodes_from(node.id for node in nodes)
        graph.add_edges_from((link.source, link.target) for link in links)
        if graph.number_of_nodes() == 0:
            return {}

        center = constraints.center
        scale = min(constraints.width, constraints.height) * self.fill
        raw = nx.spring_layout(
            graph,
            seed=self.seed,
            iterations=self.iterations,
            center=(center.x, center.y),
            scale=scale,
        )
        positions = {node_id: Position(float(xy[0]), float(xy[1])) for node_id, xy in raw.items()}
        logger.debug("spring layout placed %d nodes", len(positions))
        return positions


class StaticLayout:
    """Root in the middle, everything else evenly spaced on one ring, in node order."""

    def __init__(self, fill: float = 0.35) -> None:
        self.fill = fill

    def compute(
        self,
        nodes: Sequence[StoryNode],
        links: Sequence[StoryLink],
        constraints: LayoutConstraints,
    ) -> Dict[str, Position]:
        center = constraints.center
        ring = [node for node in nodes if node.type is not NodeType.ROOT]
        radius = min(constraints.width, constraints.height) * self.fill
        positions: Dict[str, Position] = {}
        for node in nodes:
            if node.type is NodeType.ROOT:
                positions[node.id] = center
        for idx, node in enumerate(ring):
            angle = 2 * math.pi * idx / len(ring)
            positions[node.id] = Position(
                center.x + radius * math.cos(angle),
                center.y + radius * math.sin(angle),
            )
        return positions


__all__ = ["LayoutConstraints", "LayoutProvider", "Position", "SpringLayout", "StaticLayout"]
