"""Knowledge graph builder — sources, concepts, entities and facts as one graph."""

from __future__ import annotations

import logging
from typing import Sequence
from urllib.parse import urlparse

from corroborate.models.graph import (
    Cluster,
    Contradiction,
    EdgeType,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    KnowledgeGraph,
    NodeType,
)
from corroborate.models.source import AnalyzedSource, FactCategory, SourceType

logger = logging.getLogger(__name__)

MIN_SHARED_SOURCES = 2
FACT_LABEL_LENGTH = 50

SOURCE_COLORS = {
    SourceType.ACADEMIC: "#10B981",
    SourceType.NEWS: "#3B82F6",
    SourceType.GOVERNMENT: "#F59E0B",
    SourceType.COMMERCIAL: "#EF4444",
    SourceType.BLOG: "#8B5CF6",
    SourceType.SOCIAL: "#EC4899",
    SourceType.UNKNOWN: "#6B7280",
}
ENTITY_COLORS = {
    "PERSON": "#F97316",
    "NAME": "#F97316",
    "ORGANIZATION": "#06B6D4",
    "LOCATION": "#84CC16",
    "DATE": "#A855F7",
    "MONEY": "#22C55E",
}
DEFAULT_ENTITY_COLOR = "#64748B"
FACT_COLORS = {
    FactCategory.STATISTIC: "#3B82F6",
    FactCategory.CLAIM: "#10B981",
    FactCategory.QUOTE: "#F59E0B",
    FactCategory.DEFINITION: "#8B5CF6",
    FactCategory.RELATIONSHIP: "#EF4444",
}
CONCEPT_COLOR = "#8B5CF6"


def domain_label(url: str) -> str:
    host = (urlparse(url).hostname or "").removeprefix("www.")
    return host.split(".")[0] if host else "Unknown Source"


class KnowledgeGraphBuilder:
    """Builds a fresh graph per request; node and edge ids are positional."""

    def __init__(
        self,
        sources: Sequence[AnalyzedSource],
        contradictions: Sequence[Contradiction] = (),
    ) -> None:
        self.sources = list(sources)
        self.contradictions = list(contradictions)
        self.nodes: list[GraphNode] = []
        self.edges: list[GraphEdge] = []

    def build(self) -> KnowledgeGraph:
        self.nodes, self.edges = [], []
        source_ids = self._add_source_nodes()
        entity_ids = self._add_entity_nodes()
        concept_ids = self._add_concept_nodes()
        self._add_fact_nodes(entity_ids, concept_ids)
        self._add_contradictions(source_ids)

        clusters = detect_clusters(self.nodes, self.edges)
        counts = {node_type: 0 for node_type in NodeType}
        for node in self.nodes:
            counts[node.type] += 1

        logger.info("Knowledge graph created: %d nodes, %d edges", len(self.nodes), len(self.edges))
        return KnowledgeGraph(
            nodes=self.nodes,
            edges=self.edges,
            clusters=clusters,
            metadata=GraphMetadata(
                total_nodes=len(self.nodes),
                total_edges=len(self.edges),
                source_nodes=counts[NodeType.SOURCE],
                concept_nodes=counts[NodeType.CONCEPT],
                entity_nodes=counts[NodeType.ENTITY],
                fact_nodes=counts[NodeType.FACT],
                average_connectivity=round(len(self.edges) / max(len(self.nodes), 1), 4),
            ),
        )

    def _add_edge(self, source: str, target: str, edge_type: EdgeType, weight: float, label: str) -> None:
        self.edges.append(
            GraphEdge(
                id=f"edge-{len(self.edges)}",
                source=source,
                target=target,
                type=edge_type,
                weight=weight,
                label=label,
            )
        )

    def _add_source_nodes(self) -> dict[str, str]:
        """Return a url -> node id map."""
        by_url: dict[str, str] = {}
        for index, analyzed in enumerate(self.sources):
            source = analyzed.source
            node_id = f"source-{index}"
            credibility = source.credibility_score
            self.nodes.append(
                GraphNode(
                    id=node_id,
                    type=NodeType.SOURCE,
                    label=source.title or domain_label(source.url),
                    size=max(10.0, credibility * 20),
                    color=SOURCE_COLORS[source.source_type],
                    data={
                        "url": source.url,
                        "credibilityScore": credibility,
                        "description": analyzed.extraction.summary,
                    },
                )
            )
            by_url.setdefault(source.url, node_id)
        return by_url

    def _add_entity_nodes(self) -> dict[str, list[str]]:
        """Return a lowercase label -> node ids map for entities shared by 2+ sources."""
        frequency: dict[tuple[str, str], int] = {}
        for analyzed in self.sources:
            mentioned = dict.fromkeys(
                (category, entity)
                for category, entities in analyzed.extraction.named_entities.items()
                for entity in entities
            )
            for key in mentioned:
                frequency[key] = frequency.get(key, 0) + 1

        by_label: dict[str, list[str]] = {}
        created = 0
        for (category, entity), count in frequency.items():
            if count < MIN_SHARED_SOURCES:
                continue
            node_id = f"entity-{created}"
            created += 1
            self.nodes.append(
                GraphNode(
                    id=node_id,
                    type=NodeType.ENTITY,
                    label=entity,
                    size=max(8.0, count * 3.0),
                    color=ENTITY_COLORS.get(category, DEFAULT_ENTITY_COLOR),
                    data={"category": category, "confidence": min(count / len(self.sources), 1.0)},
                )
            )
            by_label.setdefault(entity.lower(), []).append(node_id)
        return by_label

    def _add_concept_nodes(self) -> dict[str, str]:
        frequency: dict[str, int] = {}
        for analyzed in self.sources:
            for topic in dict.fromkeys(analyzed.extraction.main_topics):
                frequency[topic] = frequency.get(topic, 0) + 1

        by_topic: dict[str, str] = {}
        for topic, count in frequency.items():
            if count < MIN_SHARED_SOURCES:
                continue
            node_id = f"concept-{len(by_topic)}"
            self.nodes.append(
                GraphNode(
                    id=node_id,
                    type=NodeType.CONCEPT,
                    label=topic,
                    size=max(12.0, count * 4.0),
                    color=CONCEPT_COLOR,
                    data={"confidence": min(count / len(self.sources), 1.0)},
                )
            )
            by_topic[topic] = node_id
        return by_topic

    def _add_fact_nodes(
        self,
        entity_ids: dict[str, list[str]],
        concept_ids: dict[str, str],
    ) -> None:
        for index, analyzed in enumerate(self.sources):
            source_node = f"source-{index}"
            for fact_index, fact in enumerate(analyzed.source.key_facts):
                fact_node = f"fact-{index}-{fact_index}"
                label = fact.claim[:FACT_LABEL_LENGTH]
                if len(fact.claim) > FACT_LABEL_LENGTH:
                    label += "..."
                self.nodes.append(
                    GraphNode(
                        id=fact_node,
                        type=NodeType.FACT,
                        label=label,
                        size=max(6.0, fact.confidence * 12),
                        color=FACT_COLORS[fact.category],
                        data={
                            "description": fact.claim,
                            "confidence": fact.confidence,
                            "category": fact.category.value,
                        },
                    )
                )
                self._add_edge(source_node, fact_node, EdgeType.CONTAINS, fact.confidence, "contains")

                linked: set[str] = set()
                for entity in fact.entities:
                    for entity_node in entity_ids.get(entity.lower(), ()):
                        if entity_node not in linked:
                            linked.add(entity_node)
                            self._add_edge(fact_node, entity_node, EdgeType.RELATES_TO, 0.7, "mentions")

            for topic in dict.fromkeys(analyzed.extraction.main_topics):
                concept_node = concept_ids.get(topic)
                if concept_node:
                    self._add_edge(source_node, concept_node, EdgeType.RELATES_TO, 0.8, "discusses")

    def _add_contradictions(self, source_ids: dict[str, str]) -> None:
        for contradiction in self.contradictions:
            implicated = list(
                dict.fromkeys(source_ids[url] for url in contradiction.source_urls if url in source_ids)
            )
            for i, left in enumerate(implicated):
                for right in implicated[i + 1:]:
                    self._add_edge(left, right, EdgeType.CONTRADICTS, 0.9, "contradicts")


def detect_clusters(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> list[Cluster]:
    """Connected components over the undirected edge set, singletons excluded."""
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
        adjacency.setdefault(edge.target, []).append(edge.source)

    by_id = {node.id: node for node in nodes}
    visited: set[str] = set()
    clusters: list[Cluster] = []

    for node in nodes:
        if node.id in visited:
            continue
        component: list[str] = []
        stack = [node.id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            component.append(current)
            stack.extend(reversed(adjacency.get(current, [])))

        if len(component) < 2:
            continue
        members = [by_id[node_id] for node_id in component if node_id in by_id]
        label = next((n.label for n in members if n.type is NodeType.CONCEPT), None)
        if label is None:
            label = next((n.label for n in members if n.type is NodeType.SOURCE), "Cluster")
        clusters.append(Cluster(id=f"cluster-{len(clusters)}", label=label, node_ids=component))

    return clusters
