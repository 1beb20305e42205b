from __future__ import annotations

import pytest

from storymap import mcp_server


@pytest.fixture(autouse=True)
def default_story(monkeypatch):
    monkeypatch.delenv("STORYMAP_STORY_FILE", raising=False)


def test_list_nodes():
    out = mcp_server.story_list_nodes()
    assert out["ok"] is True
    assert out["data"]["root"] == "main"
    assert len(out["data"]["nodes"]) == 8
    assert out["meta"]["source"] == "storymap"


def test_get_node_with_neighbors():
    out = mcp_server.story_get_node(mcp_server.NodeIdIn(node_id="fail"))
    assert out["ok"] is True
    assert out["data"]["node"]["title"] == "💦 실패"
    assert "\n" in out["data"]["node"]["body"]
    assert out["data"]["neighbors"] == ["try", "sour", "moral"]


def test_get_unknown_node():
    out = mcp_server.story_get_node(mcp_server.NodeIdIn(node_id="wolf"))
    assert out == {"ok": False, "error": {"code": "NOT_FOUND", "msg": "node 'wolf' not found"}}


def test_ask():
    out = mcp_server.story_ask(mcp_server.AskIn(question="포도 무슨 색"))
    assert out["ok"] is True
    assert out["data"]["question"] == "포도 무슨 색"
    assert "보라색" in out["data"]["answer"]


def test_ask_blank():
    out = mcp_server.story_ask(mcp_server.AskIn(question="   "))
    assert out["ok"] is False
    assert out["error"]["code"] == "EMPTY_QUESTION"


def test_invalid_story_file_returns_envelope(monkeypatch, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text('{"nodes": [], "links": []}', encoding="utf-8")
    monkeypatch.setenv("STORYMAP_STORY_FILE", str(broken))

    listed = mcp_server.story_list_nodes()
    assert listed["ok"] is False
    assert listed["error"]["code"] == "STORY_INVALID"
    assert "non-empty" in listed["error"]["msg"]

    fetched = mcp_server.story_get_node(mcp_server.NodeIdIn(node_id="fox"))
    assert fetched["error"]["code"] == "STORY_INVALID"

    # questions do not need the map
    assert mcp_server.story_ask(mcp_server.AskIn(question="안녕"))["ok"] is True


def test_missing_story_file_returns_envelope(monkeypatch, tmp_path):
    monkeypatch.setenv("STORYMAP_STORY_FILE", str(tmp_path / "absent.json"))
    out = mcp_server.story_list_nodes()
    assert out["ok"] is False
    assert out["error"]["code"] == "STORY_INVALID"
