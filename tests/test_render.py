from __future__ import annotations

import json

from storymap.layout import LayoutConstraints, StaticLayout
from storymap.render import D3_MISSING_NOTICE, build_graph_html, graph_payload
from storymap.story import StoryGraph


def test_payload_carries_modal_text_and_positions(story_graph):
    constraints = LayoutConstraints()
    positions = StaticLayout().compute(story_graph.nodes, story_graph.links, constraints)
    payload = graph_payload(story_graph, positions)
    fox = next(item for item in payload["nodes"] if item["id"] == "fox")
    assert fox["title"] == "🦊 여우"
    assert fox["body"] == "배가 아주 고픈 여우예요.\n숲속을 거닐고 있었죠."
    assert fox["x"] == positions["fox"].x
    assert len(payload["links"]) == len(story_graph.links)


def test_payload_without_positions_lets_simulation_place_nodes(story_graph):
    payload = graph_payload(story_graph)
    assert all("x" not in item for item in payload["nodes"])


def test_html_embeds_story_and_forces(story_graph):
    html = build_graph_html(story_graph, LayoutConstraints(), d3_url="https://example.test/d3.js")
    assert '<script src="https://example.test/d3.js"></script>' in html
    assert "여우와 신포도" in html
    assert ".distance(150)" in html
    assert ".strength(-500)" in html
    assert "d.radius + 15" in html
    assert "alpha(0.3).restart()" in html
    assert "d3.zoom()" in html
    assert "translate(${d.x},${d.y})" in html


def test_html_has_missing_library_notice(story_graph):
    html = build_graph_html(story_graph, LayoutConstraints())
    assert 'typeof d3 === "undefined"' in html
    assert json.dumps(D3_MISSING_NOTICE, ensure_ascii=False) in html


def test_script_closing_tag_in_data_is_escaped(story_data):
    story_data["nodes"][2]["description"] = "</script><b>oops</b>"
    graph = StoryGraph.from_dict(story_data)
    html = build_graph_html(graph, LayoutConstraints())
    assert "</script><b>oops" not in html
    assert "<\\/script><b>oops" in html
