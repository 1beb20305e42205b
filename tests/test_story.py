from __future__ import annotations

import copy
import json

import pytest

from storymap.story import (
    DEFAULT_NODES,
    NodeType,
    StoryGraph,
    StoryGraphError,
    StoryLink,
    StoryNode,
    load_story_graph,
)


def _node(node_id: str, node_type: NodeType = NodeType.EVENT) -> StoryNode:
    return StoryNode(id=node_id, label=node_id, type=node_type, color="#000000", radius=10, icon="*", description="")


def test_default_graph_has_single_root_and_resolved_links(story_graph):
    roots = [node for node in story_graph.nodes if node.type is NodeType.ROOT]
    assert [node.id for node in roots] == ["main"]
    assert story_graph.root.id == "main"
    ids = {node.id for node in story_graph.nodes}
    for link in story_graph.links:
        assert link.source in ids
        assert link.target in ids
    assert len(story_graph.nodes) == 8
    assert len(story_graph.links) == 8


def test_lookup_by_id(story_graph):
    fox = story_graph.get_node("fox")
    assert fox is not None
    assert fox.label == "여우"
    assert fox.icon == "🦊"
    assert story_graph.get_node("wolf") is None
    with pytest.raises(KeyError):
        story_graph.require_node("wolf")


def test_neighbors_are_undirected_and_ordered(story_graph):
    assert story_graph.neighbors("try") == ["fox", "grapes", "fail"]
    assert story_graph.neighbors("main") == ["fox", "grapes"]
    assert story_graph.neighbors("moral") == ["fail"]


def test_nodes_are_immutable(story_graph):
    with pytest.raises(AttributeError):
        story_graph.root.label = "changed"  # type: ignore[misc]


def test_payload_uses_plain_values(story_graph):
    payload = story_graph.to_payload()
    assert payload["nodes"][0]["type"] == "root"
    assert payload["links"][0] == {"source": "main", "target": "fox"}
    json.dumps(payload, ensure_ascii=False)


def test_duplicate_links_are_kept():
    graph = StoryGraph(
        [_node("r", NodeType.ROOT), _node("x")],
        [StoryLink("r", "x"), StoryLink("r", "x")],
    )
    assert len(graph.links) == 2
    assert graph.neighbors("r") == ["x"]


def test_rejects_duplicate_ids():
    with pytest.raises(StoryGraphError, match="Duplicate"):
        StoryGraph([_node("r", NodeType.ROOT), _node("r")], [])


def test_rejects_dangling_link():
    with pytest.raises(StoryGraphError, match="unknown node 'ghost'"):
        StoryGraph([_node("r", NodeType.ROOT)], [StoryLink("r", "ghost")])


@pytest.mark.parametrize("types", [
    [NodeType.EVENT, NodeType.EVENT],
    [NodeType.ROOT, NodeType.ROOT],
])
def test_requires_exactly_one_root(types):
    nodes = [_node(f"n{i}", t) for i, t in enumerate(types)]
    with pytest.raises(StoryGraphError, match="exactly one root"):
        StoryGraph(nodes, [StoryLink("n0", "n1")])


def test_rejects_disconnected_graph():
    with pytest.raises(StoryGraphError, match="not connected"):
        StoryGraph([_node("r", NodeType.ROOT), _node("x"), _node("island")], [StoryLink("r", "x")])


def test_from_dict_accepts_desc_key(story_data):
    graph = StoryGraph.from_dict(story_data)
    assert graph.require_node("a").description == "first\\nsecond"
    assert graph.require_node("a").type is NodeType.CHARACTER
    assert graph.root.id == "hub"


def test_from_dict_rejects_unknown_type(story_data):
    bad = copy.deepcopy(story_data)
    bad["nodes"][1]["type"] = "villain"
    with pytest.raises(StoryGraphError, match="unknown type"):
        StoryGraph.from_dict(bad)


def test_from_dict_requires_nodes():
    with pytest.raises(StoryGraphError):
        StoryGraph.from_dict({"nodes": [], "links": []})


def test_load_story_graph_from_file(story_file):
    graph = load_story_graph(story_file)
    assert [node.id for node in graph.nodes] == ["hub", "a", "b"]


def test_load_story_graph_rejects_bad_json(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{nodes: ", encoding="utf-8")
    with pytest.raises(StoryGraphError, match="not valid JSON"):
        load_story_graph(p)


def test_default_descriptions_use_literal_newline_escapes():
    assert "\\n" in DEFAULT_NODES[1].description
    assert "\n" not in DEFAULT_NODES[1].description
