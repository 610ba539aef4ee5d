"""Call graph used for purity analysis."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, Optional, Set

from sigil.ast import CallExpr, Purity


@dataclass(frozen=True)
class EffectNode:
    """A callable in the program or the registry."""

    name: str
    kind: str
    purity: Purity

    @property
    def label(self) -> str:
        return f"{self.kind} '{self.name}'"

    @property
    def is_effectful(self) -> bool:
        return self.purity is Purity.EFFECTFUL


@dataclass(frozen=True)
class CallSite:
    """An edge: ``caller`` calls ``callee`` at ``call``."""

    caller: str
    callee: str
    call: CallExpr = field(compare=False, repr=False)


class EffectGraph:
    """
    Directed graph with a node per callable and an edge per call site.

    Reachability of effectful nodes is computed once with a multi-source
    breadth-first search over reversed edges, which is linear in the size of
    the graph, terminates on cycles and yields a shortest witness path for
    every tainted node.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, EffectNode] = {}
        self.sites: Dict[str, List[CallSite]] = {}
        self._callers: Dict[str, Set[str]] = {}
        self._next_hop: Optional[Dict[str, Optional[str]]] = None

    def add_node(self, node: EffectNode) -> EffectNode:
        existing = self.nodes.get(node.name)
        if existing is not None:
            return existing
        self.nodes[node.name] = node
        self.sites.setdefault(node.name, [])
        self._next_hop = None
        return node

    def add_edge(self, caller: str, callee: str, call: CallExpr) -> CallSite:
        site = CallSite(caller, callee, call)
        self.sites.setdefault(caller, []).append(site)
        self._callers.setdefault(callee, set()).add(caller)
        self._next_hop = None
        return site

    def call_sites(self, caller: str) -> List[CallSite]:
        return list(self.sites.get(caller, ()))

    def edges(self) -> Iterator[CallSite]:
        for caller in self.sites:
            yield from self.sites[caller]

    def _compute(self) -> Dict[str, Optional[str]]:
        next_hop: Dict[str, Optional[str]] = {}
        queue: Deque[str] = deque()
        for name in sorted(self.nodes):
            if self.nodes[name].is_effectful:
                next_hop[name] = None
                queue.append(name)
        while queue:
            current = queue.popleft()
            for caller in sorted(self._callers.get(current, ())):
                if caller not in next_hop:
                    next_hop[caller] = current
                    queue.append(caller)
        return next_hop

    def reaches_effect(self, name: str) -> bool:
        if self._next_hop is None:
            self._next_hop = self._compute()
        return name in self._next_hop

    def path_to_effect(self, name: str, *, avoiding: Optional[str] = None) -> List[str]:
        """Shortest path from ``name`` to an effectful node, both ends included.

        With ``avoiding``, only paths that never pass through that node count.
        """
        if avoiding is not None:
            return self._path_avoiding(name, avoiding)
        if not self.reaches_effect(name):
            return []
        assert self._next_hop is not None
        path = [name]
        hop = self._next_hop[name]
        while hop is not None:
            path.append(hop)
            hop = self._next_hop[hop]
        return path

    def _path_avoiding(self, name: str, excluded: str) -> List[str]:
        if name == excluded or name not in self.nodes:
            return []
        parents: Dict[str, Optional[str]] = {name: None}
        queue: Deque[str] = deque([name])
        while queue:
            current = queue.popleft()
            if self.nodes[current].is_effectful:
                path = [current]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                return path[::-1]
            for site in self.sites.get(current, ()):
                if site.callee != excluded and site.callee not in parents:
                    parents[site.callee] = current
                    queue.append(site.callee)
        return []


__all__ = ["EffectNode", "CallSite", "EffectGraph"]
