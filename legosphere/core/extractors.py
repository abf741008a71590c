"""
Structured extraction from free-form model output.

Each extractor makes exactly one metered generation call asking for a
specific JSON shape, then parses the reply. Parsing never raises: any
failure yields a degraded result that keeps the raw text visible.

Words are charged for the raw reply whether or not parsing succeeds.
Generation failures (ProviderError) are not parse failures and still
propagate.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.loader import ExtractionConfig
from . import prompts
from .errors import ParseError
from .json_span import parse_json_object
from .metering import MeteredGenerator

logger = logging.getLogger(__name__)

ARGUMENTS_FALLBACK_AGAINST = "Could not separate arguments. See 'Arguments For' for full text."
FLOW_FALLBACK_LABEL = "Error generating flow"
LAW_FALLBACK_CITATION = "Analysis failed"
LAW_FALLBACK_REASONING = "Could not generate analysis."
CRITIQUE_FALLBACK_GRAMMAR = "Could not parse structured analysis."
CRITIQUE_FALLBACK_CLARITY = "Please review the raw output below."


@dataclass(frozen=True)
class ArgumentPair:
    """Markdown bullet lists for and against the primary party."""
    arguments_for: str
    arguments_against: str
    degraded: bool = False


@dataclass(frozen=True)
class FlowNode:
    id: str
    label: str


@dataclass(frozen=True)
class FlowEdge:
    id: str
    source: str
    target: str


@dataclass(frozen=True)
class FlowGraph:
    """Flowchart of a case. Every edge references existing node ids."""
    nodes: List[FlowNode]
    edges: List[FlowEdge] = field(default_factory=list)
    degraded: bool = False
    raw_text: str = ""


@dataclass(frozen=True)
class LawComparison:
    """Domestic vs. foreign citations for one legal concept."""
    domestic: List[str]
    foreign: List[str]
    reasoning: str
    degraded: bool = False


@dataclass(frozen=True)
class DraftCritique:
    grammar: str
    clarity: str
    risks: str
    suggestions: str
    degraded: bool = False


def _as_text(value: Any, key: str) -> str:
    """Accept a string, or a list of strings rendered as markdown bullets."""
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return "\n".join(f"- {item}" for item in value)
    raise ParseError(f"'{key}' must be a string")


def _as_citations(value: Any, key: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ParseError(f"'{key}' must be a list of strings")


def build_flow_graph(data: Dict[str, Any]) -> FlowGraph:
    """Validate and repair a decoded flow graph.

    Policy:
    1. Node ids are coerced to strings; nodes lacking an id or label are dropped
    2. Duplicate node ids keep their first occurrence
    3. Edges pointing at unknown nodes are dropped
    4. Edges without an id get ``e{source}-{target}``

    Raises:
        ParseError: If the shape is wrong or no valid node remains
    """
    raw_nodes = data.get("nodes")
    raw_edges = data.get("edges") or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise ParseError("'nodes' and 'edges' must be lists")

    nodes: List[FlowNode] = []
    seen = set()
    for item in raw_nodes:
        if not isinstance(item, dict) or item.get("id") in (None, "") or not item.get("label"):
            logger.debug("Dropping malformed flow node: %r", item)
            continue
        node_id = str(item["id"])
        if node_id in seen:
            logger.debug("Dropping duplicate flow node id %s", node_id)
            continue
        seen.add(node_id)
        nodes.append(FlowNode(id=node_id, label=str(item["label"])))

    if not nodes:
        raise ParseError("flow graph has no valid nodes")

    edges: List[FlowEdge] = []
    for item in raw_edges:
        if not isinstance(item, dict):
            continue
        source = str(item.get("source", ""))
        target = str(item.get("target", ""))
        if source not in seen or target not in seen:
            logger.debug("Dropping edge with unknown endpoint: %r", item)
            continue
        edge_id = str(item.get("id") or f"e{source}-{target}")
        edges.append(FlowEdge(id=edge_id, source=source, target=target))

    return FlowGraph(nodes=nodes, edges=edges)


class StructuredExtractor:
    """JSON-shaped legal analyses built on a metered generator."""

    def __init__(self, generator: MeteredGenerator, config: Optional[ExtractionConfig] = None):
        self.generator = generator
        self.config = config or ExtractionConfig()

    def _context(self, text: str) -> str:
        return prompts.truncate_context(text, self.config.context_char_budget)

    def generate_arguments(self, case_description: str) -> ArgumentPair:
        """Arguments for and against the primary party of a case."""
        prompt = prompts.ARGUMENTS_PROMPT.format(case_description=self._context(case_description))
        raw = self.generator.generate(prompt, "arguments").text
        try:
            data = parse_json_object(raw, ("argumentsFor", "argumentsAgainst"))
            return ArgumentPair(
                arguments_for=_as_text(data["argumentsFor"], "argumentsFor"),
                arguments_against=_as_text(data["argumentsAgainst"], "argumentsAgainst")
            )
        except ParseError as e:
            logger.warning("Degrading argument extraction: %s", e)
            return ArgumentPair(
                arguments_for=raw,
                arguments_against=ARGUMENTS_FALLBACK_AGAINST,
                degraded=True
            )

    def generate_legal_flow(self, text: str) -> FlowGraph:
        """Break case facts into a flowchart of events and consequences."""
        prompt = prompts.LEGAL_FLOW_PROMPT.format(text=self._context(text))
        raw = self.generator.generate(prompt, "legal-flow").text
        try:
            return build_flow_graph(parse_json_object(raw, ("nodes",)))
        except ParseError as e:
            logger.warning("Degrading flow extraction: %s", e)
            return FlowGraph(
                nodes=[FlowNode(id="1", label=FLOW_FALLBACK_LABEL)],
                edges=[],
                degraded=True,
                raw_text=raw
            )

    def analyze_node_law(self, node_label: str, source_country: str, target_country: str) -> LawComparison:
        """Compare the law governing one flowchart node across two jurisdictions."""
        prompt = prompts.LAW_COMPARISON_PROMPT.format(
            node_label=self._context(node_label),
            source_country=source_country,
            target_country=target_country
        )
        raw = self.generator.generate(prompt, "law-analysis").text
        try:
            data = parse_json_object(raw, ("domestic", "foreign", "reasoning"))
            return LawComparison(
                domestic=_as_citations(data["domestic"], "domestic"),
                foreign=_as_citations(data["foreign"], "foreign"),
                reasoning=_as_text(data["reasoning"], "reasoning")
            )
        except ParseError as e:
            logger.warning("Degrading law comparison: %s", e)
            return LawComparison(
                domestic=[LAW_FALLBACK_CITATION],
                foreign=[LAW_FALLBACK_CITATION],
                reasoning=raw.strip() or LAW_FALLBACK_REASONING,
                degraded=True
            )

    def review_draft(self, draft_text: str) -> DraftCritique:
        """Editorial critique of a legal draft."""
        prompt = prompts.DRAFT_REVIEW_PROMPT.format(draft_text=self._context(draft_text))
        raw = self.generator.generate(prompt, "review-draft").text
        keys = ("grammar", "clarity", "risks", "suggestions")
        try:
            data = parse_json_object(raw, keys)
            return DraftCritique(**{key: _as_text(data[key], key) for key in keys})
        except ParseError as e:
            logger.warning("Degrading draft review: %s", e)
            return DraftCritique(
                grammar=CRITIQUE_FALLBACK_GRAMMAR,
                clarity=CRITIQUE_FALLBACK_CLARITY,
                risks="",
                suggestions=raw,
                degraded=True
            )
