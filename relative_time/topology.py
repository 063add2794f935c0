"""
Span Topology
=============

Structural analysis of the spans registered on one timeline.

Two views are built from the same spans:
- precedence: directed, an edge a -> b whenever a ends strictly before b starts
- concurrency: undirected, an edge whenever two spans share a position

Every edge is derived from span comparators, so the graph carries no
ordering information the timeline does not already hold.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Set
import networkx as nx

from .contracts.base import StaleSpanError
from .span import IntervalRelation, TimeSpan
from .timeline import Timeline


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a span graph."""
    node_count: int
    edge_count: int
    density: float
    is_acyclic: bool
    concurrent_group_count: int


class SpanTopology:
    """
    Graph view over a timeline's spans.

    Nodes are span handles; the span itself is kept as node attribute
    `span`. Stale spans are refused, never skipped.

    A timeline never forgets its spans, so once any span endpoint is
    removed build_graph() refuses that timeline until the endpoint is
    placed back on it.
    """

    def __init__(self):
        self._precedence = nx.DiGraph()
        self._concurrency = nx.Graph()
        self._spans: Dict[int, TimeSpan] = {}

    def build_graph(self, timeline: Timeline) -> None:
        """
        Build both views from the spans registered on `timeline`.

        Replaces internal graph state.
        """
        stale = timeline.stale_spans()
        if stale:
            raise StaleSpanError(
                f"cannot build topology for {timeline!r}: stale spans "
                f"{', '.join(str(s) for s in stale)}"
            )

        self.clear()
        spans = timeline.spans

        for span in spans:
            self._spans[span.handle] = span
            self._precedence.add_node(span.handle, span=span, name=str(span))
            self._concurrency.add_node(span.handle, span=span, name=str(span))

        for i, a in enumerate(spans):
            for b in spans[i + 1:]:
                if a < b:
                    self._precedence.add_edge(
                        a.handle, b.handle, relation=IntervalRelation.BEFORE.value
                    )
                elif b < a:
                    self._precedence.add_edge(
                        b.handle, a.handle, relation=IntervalRelation.BEFORE.value
                    )
                else:
                    self._concurrency.add_edge(
                        a.handle, b.handle, relation=a.relation_to(b).value
                    )

    @property
    def precedence_graph(self) -> nx.DiGraph:
        return self._precedence

    @property
    def concurrency_graph(self) -> nx.Graph:
        return self._concurrency

    def get_concurrent_groups(self) -> List[Set[int]]:
        """
        Sets of span handles linked by shared positions.

        Returned in arbitrary order.
        """
        if not self._concurrency:
            return []
        return [set(c) for c in nx.connected_components(self._concurrency)]

    def get_longest_chain(self) -> List[TimeSpan]:
        """Longest sequence of spans each ending strictly before the next starts."""
        if not self._precedence:
            return []
        return [self._spans[h] for h in nx.dag_longest_path(self._precedence)]

    def get_immediate_successors(self, span: TimeSpan) -> List[TimeSpan]:
        """
        Spans after `span` with no other span strictly between them.

        Read from the transitive reduction of the precedence view.
        """
        if span.handle not in self._precedence:
            return []
        reduced = nx.transitive_reduction(self._precedence)
        return [self._spans[h] for h in sorted(reduced.successors(span.handle))]

    def relation_counts(self) -> Dict[IntervalRelation, int]:
        """How often each relation holds over ordered pairs of distinct spans."""
        spans = list(self._spans.values())
        counts = Counter(
            a.relation_to(b)
            for a in spans
            for b in spans
            if a is not b
        )
        return dict(counts)

    def compute_metrics(self) -> GraphMetrics:
        if not self._precedence:
            return GraphMetrics(0, 0, 0.0, True, 0)

        return GraphMetrics(
            node_count=self._precedence.number_of_nodes(),
            edge_count=self._precedence.number_of_edges(),
            density=nx.density(self._precedence),
            is_acyclic=nx.is_directed_acyclic_graph(self._precedence),
            concurrent_group_count=nx.number_connected_components(self._concurrency)
        )

    def clear(self) -> None:
        self._precedence.clear()
        self._concurrency.clear()
        self._spans.clear()
