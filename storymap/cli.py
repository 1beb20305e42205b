from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .chatbot import StoryResponder
from .config import load_settings, story_graph_for
from .session import ChatSession, Sender, SleepScheduler
from .story import StoryGraphError, load_story_graph


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Chat with the story doctor about 'The Fox and the Sour Grapes'.")
    parser.add_argument(
        "--validate",
        metavar="STORY_JSON",
        help="Validate a story map JSON file and exit",
    )
    parser.add_argument("--no-delay", action="store_true", help="Answer immediately instead of pausing to 'think'")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.WARNING))

    if args.validate:
        try:
            graph = load_story_graph(Path(args.validate))
        except (OSError, StoryGraphError) as exc:
            print(f"Invalid story map: {exc}", file=sys.stderr)
            return 1
        print(f"OK: {len(graph.nodes)} nodes, {len(graph.links)} links, root '{graph.root.id}'.")
        return 0

    try:
        graph = story_graph_for(settings)
    except (OSError, StoryGraphError) as exc:
        # chat does not depend on the graph; keep going
        logger.warning("Story map unavailable: %s", exc)
    else:
        print(f"{graph.root.icon} {graph.root.label}")

    window = (0.0, 0.0) if args.no_delay else settings.think_window
    session = ChatSession(StoryResponder(think_window=window), scheduler=SleepScheduler())
    session.open()

    print("Ask the story doctor anything. Type 'quit' to leave.")
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break
        if line.strip().lower() in {"quit", "exit"}:
            print("Goodbye.")
            break

        seen = len(session.messages)
        if session.submit(line) is None:
            continue
        for message in session.messages[seen:]:
            if message.sender is Sender.BOT:
                print(f"\n{_plain(message.text)}\n")
    return 0


def _plain(text: str) -> str:
    return text.replace("<br>", "\n").replace("<strong>", "").replace("</strong>", "")


if __name__ == "__main__":
    sys.exit(main())
