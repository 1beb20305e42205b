"""Interactive story map with a scripted story-doctor chat."""

from .chatbot import StoryResponder
from .detail import DetailModal
from .session import ChatSession
from .story import StoryGraph, StoryGraphError, default_story_graph

__all__ = ["ChatSession", "DetailModal", "StoryGraph", "StoryGraphError", "StoryResponder", "default_story_graph"]
