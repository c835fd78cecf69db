"""Type dependency graph.

Nodes are type names. An edge A -> B means A's definition mentions B. Value
edges are mentions that place a B inside every A on the wire (scalar fields,
arrays, typedef targets, discriminants). Optional edges are ``B *x`` mentions,
which encode as a presence flag and may end the recursion.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Set


class DependencyGraph:
    """Tracks which types depend on which other types."""

    def __init__(self):
        """Initialize empty dependency graph."""
        self.edges: dict[str, set[str]] = {}           # type name -> types held by value
        self.optional_edges: dict[str, set[str]] = {}  # type name -> types held behind '*'
        self.nodes: list[str] = []

    def add_node(self, name: str) -> None:
        if name not in self.edges:
            self.edges[name] = set()
            self.optional_edges[name] = set()
            self.nodes.append(name)

    def add_dependency(self, from_type: str, to_type: str, optional: bool = False) -> None:
        """Record that from_type mentions to_type.

        Args:
            from_type: The type holding the reference.
            to_type: The type being referenced.
            optional: True when the reference sits behind optional indirection.
        """
        self.add_node(from_type)
        self.add_node(to_type)
        target = self.optional_edges if optional else self.edges
        target[from_type].add(to_type)

    def get_dependencies(self, name: str, include_optional: bool = True) -> set[str]:
        """Get all types directly referenced by this type."""
        deps = set(self.edges.get(name, set()))
        if include_optional:
            deps |= self.optional_edges.get(name, set())
        return deps

    def get_transitive_closure(self, roots: set[str], include_optional: bool = True) -> set[str]:
        """Compute all types reachable from ``roots`` (breadth-first search)."""
        reachable = set(roots)
        worklist = list(roots)

        while worklist:
            current = worklist.pop(0)
            for dep in self.get_dependencies(current, include_optional):
                if dep not in reachable:
                    reachable.add(dep)
                    worklist.append(dep)

        return reachable

    def reversed(self) -> "DependencyGraph":
        """Graph with every edge flipped (dependents instead of dependencies)."""
        rev = DependencyGraph()
        for name in self.nodes:
            rev.add_node(name)
        for src in self.nodes:
            for dst in self.edges[src]:
                rev.add_dependency(dst, src)
            for dst in self.optional_edges[src]:
                rev.add_dependency(dst, src, optional=True)
        return rev

    def find_cycle(self) -> List[str]:
        """Find a cycle made of value edges only, using DFS. Empty if none."""
        visited: Set[str] = set()
        rec_stack: Set[str] = set()

        def dfs(node: str, path: List[str]) -> Optional[List[str]]:
            visited.add(node)
            rec_stack.add(node)
            path.append(node)

            for neighbor in sorted(self.edges.get(node, ())):
                if neighbor not in visited:
                    result = dfs(neighbor, path)
                    if result:
                        return result
                elif neighbor in rec_stack:
                    cycle_start = path.index(neighbor)
                    return path[cycle_start:]

            rec_stack.remove(node)
            path.pop()
            return None

        for node in self.nodes:
            if node not in visited:
                result = dfs(node, [])
                if result:
                    return result

        return []

    def topological_order(self) -> Optional[List[str]]:
        """Order types so every type follows the types it holds by value.

        Kahn's algorithm over value edges. Returns None if they form a cycle.
        """
        # in_degree counts unprocessed dependencies of each type
        in_degree: Dict[str, int] = {n: len(self.edges[n]) for n in self.nodes}
        dependents: Dict[str, List[str]] = {n: [] for n in self.nodes}
        for src in self.nodes:
            for dst in self.edges[src]:
                dependents[dst].append(src)

        queue = [n for n in self.nodes if in_degree[n] == 0]
        result: List[str] = []

        while queue:
            current = queue.pop(0)
            result.append(current)
            for dependent in dependents[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(result) != len(self.nodes):
            return None
        return result

    def __repr__(self) -> str:
        total_edges = sum(len(deps) for deps in self.edges.values())
        total_optional = sum(len(deps) for deps in self.optional_edges.values())
        return f"DependencyGraph({len(self.nodes)} types, {total_edges} value edges, {total_optional} optional edges)"
