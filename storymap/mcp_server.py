# mcp_server.py
# Story map MCP tools: node lookup and questions for the story doctor.
# Run over stdio:  python -m storymap.mcp_server

from __future__ import annotations

import datetime
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from .chatbot import StoryResponder
from .config import load_settings, story_graph_for
from .detail import format_body, format_title
from .story import StoryGraph, StoryGraphError


responder = StoryResponder(think_window=(0.0, 0.0))


def _ok(data: Any) -> Dict[str, Any]:
    ts = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return {"ok": True, "data": data, "meta": {"ts": ts, "source": "storymap"}}


def _err(code: str, msg: str) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": code, "msg": msg}}


def _graph() -> StoryGraph:
    # read per call so a bad STORYMAP_STORY_FILE surfaces as an error envelope
    return story_graph_for(load_settings())


# ===== Models =====
class NodeIdIn(BaseModel):
    node_id: str = Field(description="Story node id, e.g. 'fox' or 'grapes'")


class AskIn(BaseModel):
    question: str = Field(description="Free-text question about the story")


class AskOut(BaseModel):
    question: str
    answer: str


# ===== Server =====
mcp = FastMCP("storymap.v1")


@mcp.tool()
def story_list_nodes() -> Dict[str, Any]:
    try:
        graph = _graph()
    except (OSError, StoryGraphError) as exc:
        return _err("STORY_INVALID", str(exc))
    return _ok({"root": graph.root.id, "nodes": [node.to_json() for node in graph.nodes]})


# ---- Tool: node + 1-hop neighbors (undirected) ----
@mcp.tool()
def story_get_node(input: NodeIdIn) -> Dict[str, Any]:
    try:
        graph = _graph()
    except (OSError, StoryGraphError) as exc:
        return _err("STORY_INVALID", str(exc))
    node = graph.get_node(input.node_id)
    if node is None:
        return _err("NOT_FOUND", f"node '{input.node_id}' not found")
    payload = node.to_json()
    payload["title"] = format_title(node)
    payload["body"] = format_body(node)
    return _ok({"node": payload, "neighbors": graph.neighbors(node.id)})


@mcp.tool()
def story_ask(input: AskIn) -> Dict[str, Any]:
    if not input.question.strip():
        return _err("EMPTY_QUESTION", "question must not be blank")
    out = AskOut(question=input.question, answer=responder.respond(input.question))
    return _ok(out.model_dump())


if __name__ == "__main__":
    mcp.run()
