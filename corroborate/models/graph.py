"""Knowledge graph data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeType(Enum):
    SOURCE = "source"
    CONCEPT = "concept"
    ENTITY = "entity"
    FACT = "fact"


class EdgeType(Enum):
    CITES = "cites"
    RELATES_TO = "relates_to"
    CONTRADICTS = "contradicts"
    SUPPORTS = "supports"
    CONTAINS = "contains"


@dataclass
class GraphNode:
    id: str
    type: NodeType
    label: str
    size: float
    color: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class GraphEdge:
    id: str
    source: str
    target: str
    type: EdgeType
    weight: float
    label: str | None = None


@dataclass
class Cluster:
    id: str
    label: str
    node_ids: list[str] = field(default_factory=list)


@dataclass
class Contradiction:
    """An externally supplied record of sources disagreeing on a claim."""

    claim: str
    source_urls: list[str] = field(default_factory=list)


@dataclass
class GraphMetadata:
    total_nodes: int = 0
    total_edges: int = 0
    source_nodes: int = 0
    concept_nodes: int = 0
    entity_nodes: int = 0
    fact_nodes: int = 0
    average_connectivity: float = 0.0


@dataclass
class KnowledgeGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    clusters: list[Cluster] = field(default_factory=list)
    metadata: GraphMetadata = field(default_factory=GraphMetadata)
