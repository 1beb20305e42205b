from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from .detail import EMPHASIS_DURATION_MS, EMPHASIS_SCALE, format_body, format_title
from .layout import LayoutConstraints, Position
from .story import StoryGraph


DEFAULT_D3_URL = "https://d3js.org/d3.v7.min.js"

D3_MISSING_NOTICE = "D3 라이브러리를 불러오지 못했습니다. 인터넷 연결을 확인해주세요."


def graph_payload(graph: StoryGraph, positions: Mapping[str, Position] | None = None) -> Dict[str, Any]:
    """Nodes and links as the browser simulation expects them, with modal text pre-formatted."""
    positions = positions or {}
    nodes = []
    for node in graph.nodes:
        item = node.to_json()
        item["title"] = format_title(node)
        item["body"] = format_body(node)
        pos = positions.get(node.id)
        if pos is not None:
            item["x"], item["y"] = pos.x, pos.y
        nodes.append(item)
    return {"nodes": nodes, "links": [link.to_json() for link in graph.links]}


def _script_json(data: Any) -> str:
    # keep "</script>" inside string values from closing the tag
    return json.dumps(data, ensure_ascii=False).replace("</", "<\\/")


def build_graph_html(
    graph: StoryGraph,
    constraints: LayoutConstraints,
    positions: Mapping[str, Position] | None = None,
    *,
    d3_url: str = DEFAULT_D3_URL,
    container_id: str = "story-map",
    height_css: str = "640px",
) -> str:
    data_js = _script_json(graph_payload(graph, positions))
    notice_js = json.dumps(D3_MISSING_NOTICE, ensure_ascii=False)
    c = constraints

    return f"""
    <style>
      #{container_id} {{ width: 100%; height: {height_css}; position: relative; overflow: hidden;
        background: #fffaf0; border-radius: 14px; font-family: sans-serif; }}
      #{container_id} .node text {{ text-anchor: middle; pointer-events: none; user-select: none; }}
      #{container_id}-modal {{ position: absolute; inset: 0; display: flex; align-items: center;
        justify-content: center; background: rgba(0, 0, 0, 0.35); }}
      #{container_id}-modal.hidden {{ display: none; }}
      #{container_id}-modal .card {{ background: white; border-radius: 14px; padding: 1rem 1.5rem;
        max-width: 70%; box-shadow: 0 8px 24px rgba(0, 0, 0, 0.2); }}
      #{container_id}-modal .body {{ white-space: pre-line; line-height: 1.6; }}
      #{container_id}-modal .close-btn {{ float: right; cursor: pointer; font-size: 1.4rem; }}
      #{container_id} .notice {{ padding: 2rem; color: #b00020; }}
    </style>

    <div id="{container_id}">
      <div id="{container_id}-modal" class="hidden">
        <div class="card">
          <span class="close-btn">&times;</span>
          <h3 class="title"></h3>
          <div class="body"></div>
        </div>
      </div>
    </div>

    <script src="{d3_url}"></script>
    <script>
    (function() {{
        const storyData = {data_js};
        const container = document.getElementById("{container_id}");
        const modal = document.getElementById("{container_id}-modal");
        if (!container) return;

        if (typeof d3 === "undefined") {{
            const notice = document.createElement("div");
            notice.className = "notice";
            notice.innerText = {notice_js};
            container.appendChild(notice);
            return;
        }}

        let width = container.clientWidth || {c.width};
        let height = container.clientHeight || {c.height};

        const svg = d3.select(container).append("svg")
            .attr("width", "100%")
            .attr("height", "100%");
        const g = svg.append("g");

        svg.call(d3.zoom().scaleExtent([0.3, 3]).on("zoom", (event) => {{
            g.attr("transform", event.transform);
        }}));

        const simulation = d3.forceSimulation(storyData.nodes)
            .force("link", d3.forceLink(storyData.links).id(d => d.id).distance({c.link_distance}))
            .force("charge", d3.forceManyBody().strength({c.charge_strength}))
            .force("center", d3.forceCenter(width / 2, height / 2))
            .force("collide", d3.forceCollide().radius(d => d.radius + {c.collide_padding}).iterations({c.collide_iterations}));

        const link = g.append("g")
            .attr("stroke", "#999")
            .attr("stroke-opacity", 0.6)
            .selectAll("line")
            .data(storyData.links)
            .join("line")
            .attr("stroke-width", 3);

        const nodeGroup = g.append("g")
            .selectAll("g")
            .data(storyData.nodes)
            .join("g")
            .attr("class", "node")
            .call(drag(simulation))
            .style("cursor", "pointer");

        nodeGroup.append("circle")
            .attr("r", d => d.radius)
            .attr("fill", d => d.color)
            .on("click", (event, d) => {{
                event.stopPropagation();
                showDetail(d, event.currentTarget);
            }});

        nodeGroup.append("text")
            .attr("dy", "-0.2em")
            .style("font-size", d => Math.min(d.radius, 30) + "px")
            .text(d => d.icon);

        nodeGroup.append("text")
            .attr("dy", "1.3em")
            .style("font-size", "14px")
            .text(d => d.label);

        simulation.on("tick", () => {{
            link
                .attr("x1", d => d.source.x)
                .attr("y1", d => d.source.y)
                .attr("x2", d => d.target.x)
                .attr("y2", d => d.target.y);
            nodeGroup.attr("transform", d => `translate(${{d.x}},${{d.y}})`);
        }});

        window.addEventListener("resize", () => {{
            width = container.clientWidth;
            height = container.clientHeight;
            simulation.force("center", d3.forceCenter(width / 2, height / 2));
            simulation.alpha({c.reheat_alpha}).restart();
        }});

        function drag(simulation) {{
            function dragstarted(event) {{
                if (!event.active) simulation.alphaTarget({c.reheat_alpha}).restart();
                event.subject.fx = event.subject.x;
                event.subject.fy = event.subject.y;
            }}
            function dragged(event) {{
                event.subject.fx = event.x;
                event.subject.fy = event.y;
            }}
            function dragended(event) {{
                if (!event.active) simulation.alphaTarget(0);
                event.subject.fx = null;
                event.subject.fy = null;
            }}
            return d3.drag()
                .on("start", dragstarted)
                .on("drag", dragged)
                .on("end", dragended);
        }}

        function showDetail(d, element) {{
            modal.querySelector(".title").innerText = d.title;
            modal.querySelector(".body").innerText = d.body;
            modal.classList.remove("hidden");
            d3.select(element)
                .transition().duration({EMPHASIS_DURATION_MS}).attr("r", d.radius * {EMPHASIS_SCALE})
                .transition().duration({EMPHASIS_DURATION_MS}).attr("r", d.radius);
        }}

        function hideDetail() {{
            modal.classList.add("hidden");
        }}

        modal.querySelector(".close-btn").addEventListener("click", hideDetail);
        modal.addEventListener("click", (event) => {{
            if (event.target === modal) hideDetail();
        }});
    }})();
    </script>
    """


__all__ = ["DEFAULT_D3_URL", "D3_MISSING_NOTICE", "build_graph_html", "graph_payload"]
