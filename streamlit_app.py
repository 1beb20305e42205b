from __future__ import annotations

import logging
from typing import Optional

import streamlit as st
import streamlit.components.v1 as components

from storymap.chatbot import StoryResponder
from storymap.config import Settings, load_settings, story_graph_for
from storymap.detail import DetailModal
from storymap.layout import LayoutConstraints, SpringLayout
from storymap.render import build_graph_html
from storymap.session import ChatSession, Sender, SleepScheduler
from storymap.story import StoryGraph, StoryGraphError


GRAPH_HEIGHT = 640


def _initialize_session(settings: Settings) -> None:
    st.session_state.chat = ChatSession(
        StoryResponder(think_window=settings.think_window),
        scheduler=SleepScheduler(),
    )
    st.session_state.detail = DetailModal()


def _load_graph(settings: Settings) -> Optional[StoryGraph]:
    try:
        return story_graph_for(settings)
    except (OSError, StoryGraphError) as exc:
        st.error(f"Failed to load the story map: {exc}")
        return None


def _render_graph(graph: StoryGraph, settings: Settings) -> None:
    constraints = LayoutConstraints(height=GRAPH_HEIGHT)
    positions = SpringLayout(seed=settings.layout_seed).compute(graph.nodes, graph.links, constraints)
    html = build_graph_html(
        graph,
        constraints,
        positions,
        d3_url=settings.d3_url,
        height_css=f"{GRAPH_HEIGHT}px",
    )
    components.html(html, height=GRAPH_HEIGHT + 20, scrolling=False)


def _render_detail(graph: StoryGraph) -> None:
    detail: DetailModal = st.session_state.detail
    st.subheader("Story pieces")
    labels = {node.id: f"{node.icon} {node.label}" for node in graph.nodes}
    node_id = st.selectbox("Pick a piece of the story", list(labels), format_func=labels.get)
    cols = st.columns(2)
    if cols[0].button("Show"):
        detail.show_by_id(graph, node_id)
    if cols[1].button("Hide"):
        detail.hide()
    if detail.current is not None:
        with st.container(border=True):
            st.markdown(f"**{detail.current.title}**")
            st.text(detail.current.body)


def _render_chat() -> None:
    chat: ChatSession = st.session_state.chat
    label = "Close chat" if chat.is_open else "💬 Ask the story doctor"
    if st.button(label, key="chat_toggle"):
        chat.toggle()
        st.rerun()
    if not chat.is_open:
        return

    for message in chat.messages:
        role = "user" if message.sender is Sender.USER else "assistant"
        with st.chat_message(role):
            st.markdown(message.text, unsafe_allow_html=True)

    text = st.chat_input("궁금한 걸 물어봐!")
    if text and text.strip():
        with st.chat_message("user"):
            st.markdown(text.strip(), unsafe_allow_html=True)
        with st.chat_message("assistant"):
            with st.spinner("이야기 박사님이 생각 중이에요..."):
                chat.submit(text)
        st.rerun()


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))

    st.set_page_config(page_title="여우와 신포도", page_icon="📖", layout="wide")
    st.title("📖 여우와 신포도")
    st.caption("Click a circle to read that part of the story. Drag to rearrange, scroll to zoom.")

    if "chat" not in st.session_state:
        _initialize_session(settings)

    graph = _load_graph(settings)
    map_col, side_col = st.columns([3, 2])
    with map_col:
        if graph is not None:
            _render_graph(graph, settings)
    with side_col:
        if graph is not None:
            _render_detail(graph)
        _render_chat()


if __name__ == "__main__":
    main()
