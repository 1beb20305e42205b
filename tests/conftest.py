# tests/conftest.py
# Shared pytest fixtures:
#   - story_graph: the built-in fox-and-grapes map
#   - story_data / story_file: a small synthetic map as dict and as JSON on disk
#   - manual_scheduler: collects delayed callbacks so tests decide when replies land

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import pytest


# ---------- Ensure project root is importable ----------
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storymap.story import StoryGraph, default_story_graph  # noqa: E402


@pytest.fixture
def story_graph() -> StoryGraph:
    return default_story_graph()


@pytest.fixture
def story_data() -> Dict[str, Any]:
    """Three-node map: root with two children, one using the legacy 'desc' key."""
    return {
        "nodes": [
            {"id": "hub", "label": "Hub", "type": "root", "color": "#111111", "radius": 30, "icon": "H",
             "description": "center"},
            {"id": "a", "label": "A", "type": "character", "color": "#222222", "radius": 20, "icon": "A",
             "desc": "first\\nsecond"},
            {"id": "b", "label": "B", "type": "event", "color": "#333333", "radius": 20, "icon": "B",
             "description": "b"},
        ],
        "links": [
            {"source": "hub", "target": "a"},
            {"source": "a", "target": "b"},
        ],
    }


@pytest.fixture
def story_file(tmp_path: Path, story_data: Dict[str, Any]) -> Path:
    p = tmp_path / "story.json"
    p.write_text(json.dumps(story_data, ensure_ascii=False, indent=2), encoding="utf-8")
    return p


class ManualScheduler:
    def __init__(self) -> None:
        self.calls: List[Tuple[float, Callable[[], None]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.calls.append((delay, callback))

    def run_all(self, order: List[int] | None = None) -> None:
        calls, self.calls = self.calls, []
        indices = order if order is not None else range(len(calls))
        for idx in indices:
            calls[idx][1]()


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()
