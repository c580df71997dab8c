"""Graphviz rendering for ER diagram text.

The diagram text is parsed, compiled into a Graphviz ``Digraph`` and piped
through the Graphviz executable to produce SVG. Features:

- Entity = HTML-like table (header row + one row per attribute)
- Key columns listed in a third cell (PK, FK, UK)
- Relationship = edge with crow's-foot arrowheads at both ends
- Non-identifying relationship (``..``) = dashed edge
"""

from __future__ import annotations

import asyncio
from html import escape
from typing import Dict, Optional, Protocol

from graphviz import Digraph

from dumplens.diagram.errors import DiagramSyntaxError
from dumplens.diagram.models import Cardinality, ERAttribute, ERDocument, EREntity
from dumplens.diagram.parser import parse_er_diagram
from dumplens.render.config import RendererConfig, get_renderer_config
from dumplens.utils.error_handling import ErrorContext, RenderError
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)


class DiagramRenderer(Protocol):
    """Anything that turns diagram text into an SVG document."""

    async def render(self, text: str) -> str:
        ...


# ---- Helper functions ----

_ARROWS: Dict[Cardinality, str] = {
    Cardinality.ZERO_OR_ONE: "teeodot",
    Cardinality.EXACTLY_ONE: "teetee",
    Cardinality.ZERO_OR_MORE: "crowodot",
    Cardinality.ONE_OR_MORE: "crowtee",
}


def _eid(entity_id: str) -> str:
    """Generate entity node ID."""
    return f"E_{entity_id}"


def _attribute_row(attr: ERAttribute, palette: Dict[str, str]) -> str:
    keys = ", ".join(attr.keys)
    if attr.comment:
        keys = f"{keys} {attr.comment}".strip()
    name = f"<U>{escape(attr.name)}</U>" if attr.is_primary_key else escape(attr.name)
    return (
        f'<TR>'
        f'<TD ALIGN="LEFT" BGCOLOR="{palette["body_fill"]}">{escape(attr.type)}</TD>'
        f'<TD ALIGN="LEFT" BGCOLOR="{palette["body_fill"]}">{name}</TD>'
        f'<TD ALIGN="LEFT" BGCOLOR="{palette["body_fill"]}">{escape(keys)}</TD>'
        f'</TR>'
    )


def _entity_label(entity_id: str, entity: Optional[EREntity], config: RendererConfig) -> str:
    palette = config.palette
    rows = [
        f'<TR><TD COLSPAN="3" BGCOLOR="{palette["header_fill"]}"><B>{escape(entity_id)}</B></TD></TR>'
    ]
    if entity is not None:
        rows.extend(_attribute_row(attr, palette) for attr in entity.attributes)
    return (
        f'<<TABLE BORDER="1" CELLBORDER="0" CELLSPACING="0" '
        f'CELLPADDING="{config.entity_padding}" COLOR="{palette["border"]}">'
        + "".join(rows)
        + "</TABLE>>"
    )


# ---- Main compiler ----

def erdocument_to_graphviz(document: ERDocument, config: RendererConfig) -> Digraph:
    """Compile a parsed ER document to a Graphviz Digraph.

    Entities referenced only by relationships get an empty table.
    """
    palette = config.palette
    g = Digraph(
        "ER",
        graph_attr={
            "rankdir": config.rankdir,
            "nodesep": str(config.node_sep),
            "ranksep": str(config.rank_sep),
            "pad": str(config.pad),
            "bgcolor": palette["background"],
        },
    )
    g.attr("node", shape="plain", fontname=config.font_name, fontsize=str(config.font_size),
           fontcolor=palette["font_color"])
    g.attr("edge", fontname=config.font_name, fontsize=str(max(config.font_size - 1, 1)),
           color=palette["edge_color"], fontcolor=palette["font_color"])

    entities = {e.id: e for e in document.entities}
    for entity_id in document.entity_ids():
        g.node(_eid(entity_id), _entity_label(entity_id, entities.get(entity_id), config))

    for rel in document.relationships:
        g.edge(
            _eid(rel.left),
            _eid(rel.right),
            label=rel.label,
            dir="both",
            arrowtail=_ARROWS[rel.left_cardinality],
            arrowhead=_ARROWS[rel.right_cardinality],
            style="solid" if rel.identifying else "dashed",
        )

    return g


# ---- Rendering ----

class GraphvizRenderer:
    """Renders diagram text to SVG with the Graphviz executable.

    Uses the global renderer configuration unless one is passed explicitly.
    """

    def __init__(self, config: Optional[RendererConfig] = None):
        self._config = config

    @property
    def config(self) -> RendererConfig:
        return self._config or get_renderer_config()

    def compile(self, text: str) -> Digraph:
        """Parse and compile diagram text.

        Raises:
            RenderError: if the text cannot be parsed
        """
        try:
            document = parse_er_diagram(text)
        except DiagramSyntaxError as e:
            raise RenderError(
                str(e),
                context=ErrorContext(operation="render", additional_context={"line": e.line, "column": e.column}),
                original_exception=e,
            ) from e
        return erdocument_to_graphviz(document, self.config)

    async def render(self, text: str) -> str:
        """Render diagram text to an SVG document.

        Raises:
            RenderError: on syntax errors, a missing executable or a failed run
        """
        graph = self.compile(text)
        engine = self.config.engine

        try:
            process = await asyncio.create_subprocess_exec(
                engine, "-Tsvg",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise RenderError(
                f"Graphviz executable '{engine}' not found; make sure Graphviz is installed and on PATH",
                context=ErrorContext(operation="render"),
                original_exception=e,
            ) from e

        stdout, stderr = await process.communicate(graph.source.encode("utf-8"))
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise RenderError(
                f"{engine} exited with status {process.returncode}: {detail}",
                context=ErrorContext(operation="render"),
            )

        svg = stdout.decode("utf-8")
        logger.debug(f"Rendered diagram ({len(text)} chars of text -> {len(svg)} chars of SVG)")
        return svg
