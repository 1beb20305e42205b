from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence


logger = logging.getLogger(__name__)


class StoryGraphError(ValueError):
    """Raised when story data breaks a graph invariant at load time."""


class NodeType(Enum):
    ROOT = "root"
    CHARACTER = "character"
    OBJECT = "object"
    STATE = "state"
    EVENT = "event"
    THOUGHT = "thought"
    MORAL = "moral"


@dataclass(frozen=True)
class StoryNode:
    """Single illustrated story element shown as a circle on the map."""

    id: str
    label: str
    type: NodeType
    color: str
    radius: float
    icon: str
    description: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "color": self.color,
            "radius": self.radius,
            "icon": self.icon,
            "description": self.description,
        }


@dataclass(frozen=True)
class StoryLink:
    source: str
    target: str

    def to_json(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


# Descriptions keep the literal two-character "\n" sequence; the detail view
# turns it into real line breaks.
DEFAULT_NODES = [
    StoryNode(
        id="main",
        label="여우와 신포도",
        type=NodeType.ROOT,
        color="#FF6B6B",
        radius=60,
        icon="📖",
        description="이솝 우화의 재미있는 이야기!",
    ),
    StoryNode(
        id="fox",
        label="여우",
        type=NodeType.CHARACTER,
        color="#FF8E53",
        radius=50,
        icon="🦊",
        description="배가 아주 고픈 여우예요.\\n숲속을 거닐고 있었죠.",
    ),
    StoryNode(
        id="grapes",
        label="포도",
        type=NodeType.OBJECT,
        color="#9B59B6",
        radius=50,
        icon="🍇",
        description="높은 나무에 주렁주렁 매달린\\n맛있는 보라색 포도랍니다.",
    ),
    StoryNode(
        id="hungry",
        label="배고픔",
        type=NodeType.STATE,
        color="#FFA726",
        radius=40,
        icon="🤤",
        description="꼬르륵~ 여우는 배가 너무 고팠어요.\\n저 포도를 먹으면 얼마나 맛있을까?",
    ),
    StoryNode(
        id="try",
        label="점프!",
        type=NodeType.EVENT,
        color="#4FC3F7",
        radius=45,
        icon="💨",
        description="영차! 포도를 따려고\\n힘껏 점프를 했어요.\\n하나, 둘, 셋!",
    ),
    StoryNode(
        id="fail",
        label="실패",
        type=NodeType.EVENT,
        color="#E57373",
        radius=40,
        icon="💦",
        description="에구머니나!\\n포도가 너무 높아서 닿지 않아요.\\n아무리 뛰어도 소용이 없네요.",
    ),
    StoryNode(
        id="sour",
        label="신 포도",
        type=NodeType.THOUGHT,
        color="#AED581",
        radius=45,
        icon="😖",
        description="흥! 저 포도는 분명히\\n엄청 셔서 맛이 없을 거야!\\n안 먹어!",
    ),
    StoryNode(
        id="moral",
        label="교훈",
        type=NodeType.MORAL,
        color="#FDD835",
        radius=55,
        icon="✨",
        description="가질 수 없다고 해서\\n그것을 깎아내리거나\\n나쁘게 말하면 안 돼요.",
    ),
]

DEFAULT_LINKS = [
    StoryLink("main", "fox"),
    StoryLink("main", "grapes"),
    StoryLink("fox", "hungry"),
    StoryLink("fox", "try"),
    StoryLink("grapes", "try"),
    StoryLink("try", "fail"),
    StoryLink("fail", "sour"),
    StoryLink("fail", "moral"),
]


class StoryGraph:
    """Read-only story map: ordered nodes, ordered links and an id index."""

    def __init__(self, nodes: Iterable[StoryNode], links: Iterable[StoryLink]) -> None:
        self._nodes = tuple(nodes)
        self._links = tuple(links)
        self._by_id: Dict[str, StoryNode] = {}
        for node in self._nodes:
            if node.id in self._by_id:
                raise StoryGraphError(f"Duplicate node id '{node.id}'.")
            self._by_id[node.id] = node
        self._validate()

    @property
    def nodes(self) -> Sequence[StoryNode]:
        return self._nodes

    @property
    def links(self) -> Sequence[StoryLink]:
        return self._links

    @property
    def root(self) -> StoryNode:
        return next(node for node in self._nodes if node.type is NodeType.ROOT)

    def get_node(self, node_id: str) -> StoryNode | None:
        return self._by_id.get(node_id)

    def require_node(self, node_id: str) -> StoryNode:
        node = self._by_id.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    def neighbors(self, node_id: str) -> List[str]:
        """Return ids linked to ``node_id`` in either direction, in link order."""
        found: List[str] = []
        for link in self._links:
            other = None
            if link.source == node_id:
                other = link.target
            elif link.target == node_id:
                other = link.source
            if other is not None and other not in found:
                found.append(other)
        return found

    def to_payload(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "nodes": [node.to_json() for node in self._nodes],
            "links": [link.to_json() for link in self._links],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StoryGraph":
        if not isinstance(data, Mapping):
            raise StoryGraphError("Story data must be an object with 'nodes' and 'links'.")
        raw_nodes = data.get("nodes")
        raw_links = data.get("links")
        if not isinstance(raw_nodes, list) or not raw_nodes:
            raise StoryGraphError("'nodes' must be a non-empty list.")
        if not isinstance(raw_links, list):
            raise StoryGraphError("'links' must be a list.")

        nodes = [_parse_node(raw) for raw in raw_nodes]
        links = []
        for raw in raw_links:
            if not isinstance(raw, Mapping):
                raise StoryGraphError(f"Link must be an object, got {type(raw).__name__}")
            links.append(StoryLink(source=str(raw.get("source", "")), target=str(raw.get("target", ""))))
        return cls(nodes, links)

    # -----------------
    # Internal helpers
    # -----------------
    def _validate(self) -> None:
        for link in self._links:
            for end in (link.source, link.target):
                if end not in self._by_id:
                    raise StoryGraphError(f"Link '{link.source}' -> '{link.target}' points to unknown node '{end}'.")

        roots = [node.id for node in self._nodes if node.type is NodeType.ROOT]
        if len(roots) != 1:
            raise StoryGraphError(f"Story graph needs exactly one root node, found {len(roots)}: {roots}")

        reached = self._reachable_from(roots[0])
        missing = [node.id for node in self._nodes if node.id not in reached]
        if missing:
            raise StoryGraphError(f"Story graph is not connected; unreachable from root: {', '.join(missing)}")

    def _reachable_from(self, start: str) -> set[str]:
        adj: Dict[str, set[str]] = {node_id: set() for node_id in self._by_id}
        for link in self._links:
            adj[link.source].add(link.target)
            adj[link.target].add(link.source)
        seen = {start}
        queue = deque([start])
        while queue:
            cur = queue.popleft()
            for nxt in adj[cur]:
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return seen


def _parse_node(raw: Any) -> StoryNode:
    if not isinstance(raw, Mapping):
        raise StoryGraphError(f"Node must be an object, got {type(raw).__name__}")
    node_id = str(raw.get("id", "")).strip()
    if not node_id:
        raise StoryGraphError(f"Node is missing an id: {raw}")
    try:
        node_type = NodeType(raw.get("type"))
    except ValueError as exc:
        raise StoryGraphError(f"Node '{node_id}' has unknown type {raw.get('type')!r}") from exc
    try:
        radius = float(raw.get("radius", 40))
    except (TypeError, ValueError) as exc:
        raise StoryGraphError(f"Node '{node_id}' has a non-numeric radius") from exc
    return StoryNode(
        id=node_id,
        label=str(raw.get("label") or node_id),
        type=node_type,
        color=str(raw.get("color") or "#999999"),
        radius=radius,
        icon=str(raw.get("icon") or ""),
        # older data files use "desc"
        description=str(raw.get("description", raw.get("desc", ""))),
    )


def load_story_graph(path: str | Path) -> StoryGraph:
    """Load and validate a story map from a JSON file."""
    story_file = Path(path)
    try:
        data = json.loads(story_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StoryGraphError(f"Story file {story_file} is not valid JSON: {exc}") from exc
    graph = StoryGraph.from_dict(data)
    logger.debug("Loaded story graph from %s (%d nodes, %d links)", story_file, len(graph.nodes), len(graph.links))
    return graph


def default_story_graph() -> StoryGraph:
    return StoryGraph(DEFAULT_NODES, DEFAULT_LINKS)


__all__ = [
    "StoryGraph",
    "StoryGraphError",
    "StoryLink",
    "StoryNode",
    "NodeType",
    "DEFAULT_NODES",
    "DEFAULT_LINKS",
    "default_story_graph",
    "load_story_graph",
]
