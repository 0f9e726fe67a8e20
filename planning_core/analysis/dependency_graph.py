"""Dependency graph construction and analysis."""

import heapq
from typing import Dict, Iterable, List, Optional, Set, Tuple

import structlog

from ..errors import UnknownWorkItemError
from ..models.analysis import GraphAnalysisResult
from ..models.work_item import (
    DependencyDeclaration,
    DependencyEdge,
    EdgeSource,
    RelationshipKind,
    WorkItem,
)
from .keywords import KeywordExtractor

log = structlog.get_logger()

WHITE, GRAY, BLACK = 0, 1, 2


class DependencyGraph:
    """Directed graph over work items.

    An edge ``from -> to`` means ``to`` must complete before ``from``.
    Edges come from explicit declarations on the items and, optionally,
    from keyword inference (``detect_implicit_dependencies``).
    """

    def __init__(self, extractor: Optional[KeywordExtractor] = None, config: Optional[dict] = None):
        """Initialize graph with keyword extractor and configuration."""
        self.config = config or {}
        self.dependency_config = self.config.get('dependencies', {})
        self.implicit_threshold = self.dependency_config.get('implicit_threshold', 0.5)
        self.extractor = extractor or KeywordExtractor(
            min_score=self.dependency_config.get('min_keyword_score', 0.1)
        )

        self._items: Dict[str, WorkItem] = {}
        self._edges: Dict[Tuple[str, str], DependencyEdge] = {}
        # Explicit edges keyed by the item whose declarations produced them
        self._declared: Dict[str, Set[Tuple[str, str]]] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_items(self, items: Iterable[WorkItem]) -> None:
        """Register work items and their explicit dependencies.

        Re-registering an id replaces that item's data and the edges it
        declared. Implicit edges touching a replaced item are dropped, so
        detection should be re-run afterwards.

        Raises:
            UnknownWorkItemError: a declaration targets an id that is neither
                registered nor part of this batch. Nothing is registered
                in that case.
        """
        batch = list(items)
        known = set(self._items) | {item.item_id for item in batch}

        planned: List[Tuple[WorkItem, List[DependencyEdge]]] = []
        for item in batch:
            edges = []
            for declaration in item.dependencies:
                if declaration.target_id not in known:
                    raise UnknownWorkItemError(declaration.target_id, referenced_by=item.item_id)
                edges.append(self._edge_from_declaration(item, declaration))
            planned.append((item, edges))

        for item, edges in planned:
            if item.item_id in self._items:
                self._forget(item.item_id)
            self._items[item.item_id] = item
            self._declared[item.item_id] = set()
            for edge in edges:
                self._put_edge(edge)
                self._declared[item.item_id].add((edge.from_id, edge.to_id))

        log.debug("Work items registered", count=len(batch), total=len(self._items))

    def add_item(self, item: WorkItem) -> None:
        """Register a single work item."""
        self.add_items([item])

    def add_dependency(
        self,
        from_id: str,
        to_id: str,
        kind: RelationshipKind = RelationshipKind.DEPENDS_ON,
        reason: str = "Explicitly defined",
    ) -> DependencyEdge:
        """Add an explicit edge meaning ``to_id`` must complete before ``from_id``."""
        for item_id in (from_id, to_id):
            if item_id not in self._items:
                raise UnknownWorkItemError(item_id)

        edge = DependencyEdge(
            from_id=from_id,
            to_id=to_id,
            kind=RelationshipKind(kind),
            source=EdgeSource.EXPLICIT,
            reason=reason,
        )
        self._put_edge(edge)
        return edge

    def detect_implicit_dependencies(self, threshold: Optional[float] = None) -> List[DependencyEdge]:
        """Infer dependencies from item text and add them as implicit edges.

        Every unordered pair is scored in both directions. A score at or
        above ``threshold`` adds an edge unless one already exists for the
        pair in that direction.

        Returns:
            The edges added by this call.
        """
        if threshold is None:
            threshold = self.implicit_threshold

        items = list(self._items.values())
        detected = []

        for i, first in enumerate(items):
            for second in items[i + 1:]:
                for dependent, dependency in ((first, second), (second, first)):
                    key = (dependent.item_id, dependency.item_id)
                    if key in self._edges:
                        continue

                    match = self.extractor.score(dependent.text, dependency.text)
                    if not match.matched or match.score < threshold:
                        continue

                    edge = DependencyEdge(
                        from_id=dependent.item_id,
                        to_id=dependency.item_id,
                        kind=RelationshipKind.DEPENDS_ON,
                        source=EdgeSource.IMPLICIT,
                        strength=match.score,
                        pattern=match.pattern,
                        reason=match.reason,
                    )
                    self._put_edge(edge)
                    detected.append(edge)

        log.info(
            "Implicit dependencies detected",
            count=len(detected),
            threshold=threshold,
            items=len(items),
        )
        return detected

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def items(self) -> List[WorkItem]:
        """Registered items in input order."""
        return list(self._items.values())

    def edges(self) -> List[DependencyEdge]:
        """All edges in insertion order."""
        return list(self._edges.values())

    def implicit_dependencies(self) -> List[DependencyEdge]:
        """All implicit edges currently in the graph."""
        return [edge for edge in self._edges.values() if edge.is_implicit]

    def export_for_visualization(self) -> Dict[str, List[dict]]:
        """Nodes and edges in a shape a graph renderer can consume directly."""
        return {
            'nodes': [
                {
                    'id': item.item_id,
                    'label': item.title or item.item_id,
                    'complexity': item.complexity,
                    'status': item.status,
                }
                for item in self._items.values()
            ],
            'edges': [edge.to_dict() for edge in self._edges.values()],
        }

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self) -> GraphAnalysisResult:
        """Run full graph analysis.

        Never raises: cycles are reported in the result and the cyclic
        items are placed at the end of the execution order.
        """
        nodes = list(self._items)
        index = {node: i for i, node in enumerate(nodes)}
        dependencies, dependents = self._adjacency(nodes)

        cycles = self._find_cycles(nodes, dependencies)
        cyclic = self._cyclic_nodes(cycles, dependencies, dependents)

        dag_nodes = [node for node in nodes if node not in cyclic]
        dag_dependencies = {
            node: [dep for dep in dependencies[node] if dep not in cyclic]
            for node in dag_nodes
        }
        dag_dependents = {
            node: [dep for dep in dependents[node] if dep not in cyclic]
            for node in dag_nodes
        }

        order = self._topological_order(dag_nodes, dag_dependencies, dag_dependents, index)
        critical_path = self._critical_path(order, dag_dependents, index)
        parallel_groups = self._parallel_groups(order, dag_dependencies, index)

        cyclic_items = [node for node in nodes if node in cyclic]

        orphan_items = [
            node for node in nodes
            if not dependencies[node] and not dependents[node]
        ]
        leaf_items = [
            node for node in nodes
            if dependents[node] and not dependencies[node]
        ]

        if cycles:
            log.warning(
                "Dependency cycles detected",
                cycles=len(cycles),
                cyclic_items=cyclic_items,
            )

        return GraphAnalysisResult(
            execution_order=order + cyclic_items,
            critical_path=critical_path,
            cycles=cycles,
            parallel_groups=parallel_groups,
            orphan_items=orphan_items,
            leaf_items=leaf_items,
            cyclic_items=cyclic_items,
        )

    def _adjacency(self, nodes: List[str]) -> Tuple[Dict[str, List[str]], Dict[str, List[str]]]:
        """Ordering edges as (node -> its dependencies, node -> its dependents)."""
        dependencies: Dict[str, List[str]] = {node: [] for node in nodes}
        dependents: Dict[str, List[str]] = {node: [] for node in nodes}

        for edge in self._edges.values():
            if not edge.is_ordering:
                continue
            dependencies[edge.from_id].append(edge.to_id)
            dependents[edge.to_id].append(edge.from_id)

        return dependencies, dependents

    def _find_cycles(self, nodes: List[str], dependencies: Dict[str, List[str]]) -> List[List[str]]:
        """Three-color DFS; every edge into a gray node closes one cycle."""
        color = {node: WHITE for node in nodes}
        cycles = []

        for root in nodes:
            if color[root] != WHITE:
                continue

            color[root] = GRAY
            path = [root]
            stack = [iter(dependencies[root])]

            while stack:
                neighbor = next(stack[-1], None)
                if neighbor is None:
                    stack.pop()
                    color[path.pop()] = BLACK
                    continue

                if color[neighbor] == GRAY:
                    start = path.index(neighbor)
                    cycles.append(path[start:] + [neighbor])
                elif color[neighbor] == WHITE:
                    color[neighbor] = GRAY
                    path.append(neighbor)
                    stack.append(iter(dependencies[neighbor]))

        return cycles

    def _cyclic_nodes(
        self,
        cycles: List[List[str]],
        dependencies: Dict[str, List[str]],
        dependents: Dict[str, List[str]],
    ) -> Set[str]:
        """Nodes sharing a strongly connected part with a reported cycle."""
        cyclic: Set[str] = set()
        for cycle in cycles:
            anchor = cycle[0]
            if anchor in cyclic:
                continue
            reaches = _reachable(anchor, dependencies)
            reached_by = _reachable(anchor, dependents)
            cyclic |= (reaches & reached_by) | set(cycle)
        return cyclic

    def _topological_order(
        self,
        nodes: List[str],
        dependencies: Dict[str, List[str]],
        dependents: Dict[str, List[str]],
        index: Dict[str, int],
    ) -> List[str]:
        """Kahn's algorithm, ready nodes emitted in input order."""
        remaining = {node: len(dependencies[node]) for node in nodes}
        ready = [index[node] for node in nodes if remaining[node] == 0]
        heapq.heapify(ready)

        names = {index[node]: node for node in nodes}
        order = []

        while ready:
            node = names[heapq.heappop(ready)]
            order.append(node)
            for dependent in dependents[node]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, index[dependent])

        return order

    def _critical_path(
        self,
        order: List[str],
        dependents: Dict[str, List[str]],
        index: Dict[str, int],
    ) -> List[str]:
        """Longest chain by edge count, dependency first.

        Ties go to the chain whose first node comes earliest in input
        order, then to the earliest successor at each step.
        """
        if not order:
            return []

        length: Dict[str, int] = {}
        successor: Dict[str, Optional[str]] = {}

        for node in reversed(order):
            best_len, best_next = 0, None
            for dependent in sorted(set(dependents[node]), key=index.__getitem__):
                candidate = length[dependent] + 1
                if candidate > best_len:
                    best_len, best_next = candidate, dependent
            length[node] = best_len
            successor[node] = best_next

        start = min(order, key=lambda node: (-length[node], index[node]))

        path = []
        current: Optional[str] = start
        while current is not None:
            path.append(current)
            current = successor[current]

        return path

    def _parallel_groups(
        self,
        order: List[str],
        dependencies: Dict[str, List[str]],
        index: Dict[str, int],
    ) -> List[List[str]]:
        """Group nodes by depth in topological order.

        Depth is the longest dependency chain below a node, so two nodes at
        the same depth never have a path between them. This is a heuristic
        partition, not a minimum antichain cover.
        """
        depth: Dict[str, int] = {}
        for node in order:
            depth[node] = max((depth[dep] + 1 for dep in dependencies[node]), default=0)

        groups: List[List[str]] = []
        for node in sorted(order, key=index.__getitem__):
            while len(groups) <= depth[node]:
                groups.append([])
            groups[depth[node]].append(node)

        return groups

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _edge_from_declaration(self, item: WorkItem, declaration: DependencyDeclaration) -> DependencyEdge:
        """Translate a declaration on ``item`` into a directed edge."""
        kind = RelationshipKind(declaration.kind)
        if kind == RelationshipKind.BLOCKS:
            # item blocks target: the target waits for item
            from_id, to_id = declaration.target_id, item.item_id
        else:
            from_id, to_id = item.item_id, declaration.target_id

        return DependencyEdge(
            from_id=from_id,
            to_id=to_id,
            kind=kind,
            source=EdgeSource.EXPLICIT,
            reason=declaration.description or "Explicitly defined",
        )

    def _put_edge(self, edge: DependencyEdge) -> None:
        key = (edge.from_id, edge.to_id)
        existing = self._edges.get(key)
        if existing is not None and not existing.is_implicit and edge.is_implicit:
            return
        self._edges[key] = edge

    def _forget(self, item_id: str) -> None:
        """Drop edges declared by an item and implicit edges touching it."""
        for key in self._declared.pop(item_id, set()):
            if any(key in keys for keys in self._declared.values()):
                continue
            edge = self._edges.get(key)
            if edge is not None and not edge.is_implicit:
                del self._edges[key]

        for key, edge in list(self._edges.items()):
            if edge.is_implicit and item_id in key:
                del self._edges[key]


def _reachable(start: str, adjacency: Dict[str, List[str]]) -> Set[str]:
    """Nodes reachable from ``start`` (including itself) along ``adjacency``."""
    seen = {start}
    frontier = [start]
    while frontier:
        node = frontier.pop()
        for neighbor in adjacency[node]:
            if neighbor not in seen:
                seen.add(neighbor)
                frontier.append(neighbor)
    return seen
