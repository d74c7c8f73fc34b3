"""Post-collection graph analysis (cycle detection)."""

from __future__ import annotations


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Return strongly-connected components of size ≥ 2 using Tarjan's algorithm.

    *graph* maps a module name to the names it depends on.  Each returned
    list is a group of modules that are mutually reachable, i.e. a
    dependency cycle.  Modules that are not part of any cycle are omitted.
    """
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    sccs: list[list[str]] = []
    counter = [0]

    def _visit(v: str) -> None:
        index[v] = lowlink[v] = counter[0]
        counter[0] += 1
        stack.append(v)
        on_stack.add(v)

        for w in graph[v]:
            if w not in graph:
                continue
            if w not in index:
                _visit(w)
                lowlink[v] = min(lowlink[v], lowlink[w])
            elif w in on_stack:
                lowlink[v] = min(lowlink[v], index[w])

        if lowlink[v] == index[v]:
            scc: list[str] = []
            while True:
                w = stack.pop()
                on_stack.discard(w)
                scc.append(w)
                if w == v:
                    break
            if len(scc) >= 2:
                sccs.append(sorted(scc))

    for v in graph:
        if v not in index:
            _visit(v)

    return sccs


def cyclic_edges(graph: dict[str, list[str]]) -> set[tuple[str, str]]:
    """Edges of *graph* whose endpoints lie in the same dependency cycle."""
    component: dict[str, int] = {}
    for i, scc in enumerate(find_cycles(graph)):
        for name in scc:
            component[name] = i
    return {
        (source, target)
        for source, targets in graph.items()
        for target in targets
        if source in component and component[source] == component.get(target)
    }
