from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .render import DEFAULT_D3_URL
from .story import StoryGraph, default_story_graph, load_story_graph


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    story_file: Optional[Path] = None
    d3_url: str = DEFAULT_D3_URL
    think_min: float = 0.5
    think_max: float = 1.0
    log_level: str = "WARNING"
    layout_seed: int = 7

    @property
    def think_window(self) -> Tuple[float, float]:
        return self.think_min, self.think_max


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r; expected a number, using %s", name, raw, default)
        return default
    if not math.isfinite(value):
        logger.warning("Ignoring %s=%r; expected a finite number, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%r, using %s", name, raw, default)
        return default
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read STORYMAP_* environment variables, falling back to defaults."""
    env = os.environ if env is None else env
    defaults = Settings()

    story_file = env.get("STORYMAP_STORY_FILE") or None
    think_min = _number(env, "STORYMAP_THINK_MIN", defaults.think_min)
    think_max = _number(env, "STORYMAP_THINK_MAX", defaults.think_max)
    if think_min > think_max:
        think_min, think_max = think_max, think_min

    return Settings(
        story_file=Path(story_file) if story_file else None,
        d3_url=env.get("STORYMAP_D3_URL") or defaults.d3_url,
        think_min=think_min,
        think_max=think_max,
        log_level=(env.get("STORYMAP_LOG_LEVEL") or defaults.log_level).upper(),
        layout_seed=int(_number(env, "STORYMAP_LAYOUT_SEED", defaults.layout_seed)),
    )


def story_graph_for(settings: Settings) -> StoryGraph:
    if settings.story_file is not None:
        return load_story_graph(settings.story_file)
    return default_story_graph()


__all__ = ["Settings", "load_settings", "story_graph_for"]
