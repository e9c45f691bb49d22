"""
Algorithm for finding a minimum-cost perfect matching in general graphs.
"""

from __future__ import annotations

import enum
import logging
import math
import sys
from collections import deque
from collections.abc import Sequence
from typing import Optional

from .datastruct import PriorityQueue
from .graph import Graph


_logger = logging.getLogger(__name__)

# Tolerance used for every comparison between edge slacks and dual variables.
EPSILON = 1.0e-6


class MatchingError(Exception):
    """Raised when the matching algorithm fails.

    This can only happen if there is a bug in the algorithm.
    """


class InfeasibleInstanceError(MatchingError):
    """Raised when the graph does not have a perfect matching."""


def _greater(a: float, b: float) -> bool:
    """Return True if "a" exceeds "b" by more than EPSILON."""
    return a - b > EPSILON


def maximum_cardinality_matching(
        edges: list[tuple[int, int]] | list[tuple[int, int, int|float]],
        num_vertex: Optional[int] = None
        ) -> list[tuple[int, int]]:
    """Compute a maximum-cardinality matching in the general undirected
    graph given by "edges".

    The graph is specified as a list of edges, each edge specified as
    a tuple "(x, y)" of its two vertices. Tuples "(x, y, w)" are also
    accepted; the weight is ignored.
    There may be at most one edge between any pair of vertices.
    No vertex may have an edge to itself.

    Vertices are indexed by consecutive, non-negative integers, such that
    the first vertex has index 0 and the last vertex has index (n-1).
    If "num_vertex" is given, the graph has exactly that many vertices,
    including vertices without edges.

    Returns:
        List of pairs of matched vertex indices, in the same order as
        the corresponding edges in the input.

    Raises:
        ValueError: If the input does not satisfy the constraints.
        TypeError: If the input contains invalid data types.
    """

    _check_input_types(edges, weighted=False)

    graph = _make_graph([(e[0], e[1]) for e in edges], num_vertex)
    engine = MatchingEngine(graph)

    return [graph.edge(e) for e in engine.solve_maximum_matching()]


def minimum_cost_perfect_matching(
        edges: list[tuple[int, int, int|float]],
        num_vertex: Optional[int] = None
        ) -> tuple[list[tuple[int, int]], float]:
    """Compute a minimum-cost perfect matching in the general undirected
    graph given by "edges".

    The graph is specified as a list of edges, each edge specified as a tuple
    of its two vertices and the edge cost.
    There may be at most one edge between any pair of vertices.
    No vertex may have an edge to itself.

    Vertices are indexed by consecutive, non-negative integers, such that
    the first vertex has index 0 and the last vertex has index (n-1).
    Edge costs may be integers or floating point numbers, and may be
    negative.

    Parameters:
        edges: List of edges, each edge specified as a tuple "(x, y, c)"
            where "x" and "y" are vertex indices and "c" is the edge cost.
        num_vertex: Number of vertices. Vertices without edges count;
            a graph with such a vertex has no perfect matching.
            Defaults to one more than the largest vertex index in "edges".

    Returns:
        Tuple "(pairs, cost)" where "pairs" lists the matched vertex pairs
        in the same order as the corresponding input edges, and "cost" is
        the total cost of the matching.

    Raises:
        InfeasibleInstanceError: If the graph has no perfect matching.
        ValueError: If the input does not satisfy the constraints.
        TypeError: If the input contains invalid data types.
        MatchingError: If the matching algorithm fails.
            This can only happen if there is a bug in the algorithm.
    """

    _check_input_types(edges, weighted=True)

    graph = _make_graph([(x, y) for (x, y, _w) in edges], num_vertex)
    engine = MatchingEngine(graph)

    (matching, cost) = engine.solve_minimum_cost_perfect_matching(
        [w for (_x, _y, w) in edges])

    return ([graph.edge(e) for e in matching], cost)


def _make_graph(
        edges: list[tuple[int, int]],
        num_vertex: Optional[int]
        ) -> Graph:
    """Build the graph, sized from "num_vertex" if it is given."""
    if num_vertex is None:
        return Graph.from_edges(edges)
    return Graph(num_vertex, edges)


def _check_input_types(edges: list, weighted: bool) -> None:
    """Check that the edge list consists of tuples with integer endpoints.

    Edge costs are checked separately by "_check_costs()".

    This function takes time O(m).

    Raises:
        TypeError: If the input contains invalid data types.
    """

    if not isinstance(edges, list):
        raise TypeError('"edges" must be a list')

    for e in edges:
        if weighted:
            if (not isinstance(e, tuple)) or (len(e) != 3):
                raise TypeError("Each edge must be specified as a 3-tuple")
        else:
            if (not isinstance(e, tuple)) or (len(e) not in (2, 3)):
                raise TypeError(
                    "Each edge must be specified as a 2-tuple or 3-tuple")

        if (not isinstance(e[0], int)) or (not isinstance(e[1], int)):
            raise TypeError("Edge endpoints must be integers")


def _check_costs(costs: Sequence[int|float], num_edge: int) -> None:
    """Check that "costs" holds one finite number per edge.

    This function takes time O(m).

    Raises:
        ValueError: If the input does not satisfy the constraints.
        TypeError: If the input contains invalid data types.
    """

    float_limit = sys.float_info.max / 4

    if not isinstance(costs, Sequence):
        raise TypeError('"costs" must be a sequence')

    if len(costs) != num_edge:
        raise ValueError(
            f"Expecting {num_edge} edge costs but got {len(costs)}")

    for c in costs:
        if not isinstance(c, (int, float)):
            raise TypeError(
                "Edge costs must be integers or floating point numbers")

        if isinstance(c, float) and (not math.isfinite(c)):
            raise ValueError("Edge costs must be finite numbers")

        # Dual updates add and subtract multiples of edge costs.
        if abs(c) > float_limit:
            raise ValueError(
                f"Edge costs must be less than {float_limit:g} in magnitude")


class _Label(enum.IntEnum):
    """Label of an outermost blossom in the alternating forest."""
    UNLABELED = 0
    ODD = 1
    EVEN = 2


class _MatchingContext:
    """Holds all data used by the matching algorithm.

    Every vertex and every blossom is identified by an integer in
    range 0 .. 2*n-1. Indices 0 .. n-1 denote the original vertices.
    Indices n .. 2*n-1 are slots for blossoms; a slot is taken from
    the pool of free indices when a blossom is created, and returned
    to the pool when the blossom is expanded or destroyed.

    All arrays are allocated once, when the context is created.
    """

    def __init__(self, graph: Graph) -> None:
        """Allocate the data structures of the matching algorithm."""

        num_vertex = graph.num_vertex
        num_slot = 2 * num_vertex

        # Reference to the input graph.
        # The graph does not change while the algorithm runs.
        self.graph = graph

        # "outer[b]" is the outermost blossom that contains "b",
        # or "b" itself if "b" is not contained in another blossom.
        self.outer: list[int] = list(range(num_slot))

        # "deep[b]" is the list of original vertices contained (at any
        # depth) in blossom "b". For an original vertex, "deep[x] = [x]".
        self.deep: list[list[int]] = [[] for _b in range(num_slot)]

        # "shallow[b]" is the list of sub-blossoms directly contained
        # in blossom "b", in the order of the odd circuit.
        # The list is empty for original vertices.
        self.shallow: list[list[int]] = [[] for _b in range(num_slot)]

        # "tip[b]" is the sub-blossom at which the circuit of blossom "b"
        # was closed when the blossom was created.
        self.tip: list[int] = list(range(num_slot))

        # "active[b]" is True if slot "b" holds a live vertex or blossom.
        self.active: list[bool] = num_slot * [False]

        # Label of each outermost blossom in the alternating forest.
        # Labels are recomputed by every call to "reset()".
        self.label: list[_Label] = num_slot * [_Label.UNLABELED]

        # "forest[b]" is the vertex through which outermost blossom "b"
        # is attached to its parent in the alternating forest,
        # or -1 if "b" is the root of an alternating tree.
        self.forest: list[int] = num_slot * [-1]

        # "root[b]" is the root of the alternating tree containing "b".
        self.root: list[int] = list(range(num_slot))

        # "blocked[b]" is True if blossom "b" has a positive dual variable.
        # A blocked blossom behaves as a single vertex and can not be
        # expanded until its dual variable drops back to zero.
        self.blocked: list[bool] = num_slot * [False]

        # Dual variables of vertices and blossoms.
        self.dual: list[float] = num_slot * [0.0]

        # "slack[e]" is the reduced cost of edge "e" under the current
        # dual solution. Edges with positive slack can not be used.
        self.slack: list[float] = graph.num_edge * [0.0]

        # "mate[b]" is the vertex matched to "b", or -1 if "b" is unmatched.
        self.mate: list[int] = num_slot * [-1]

        # "visited[b]" is True if outermost blossom "b" has been put
        # in the queue during the current grow phase.
        self.visited: list[bool] = num_slot * [False]

        # Stack of unused blossom slots.
        self.free_blossom: list[int] = []

        # Queue of EVEN vertices and blossoms waiting to be scanned.
        self.queue: deque[int] = deque()

        # True if the current matching covers every outermost blossom.
        self.perfect: bool = False

        self.clear()

    def clear(self) -> None:
        """Reset all data structures to an empty matching without blossoms.

        This function takes time O(n + m).
        """

        num_vertex = self.graph.num_vertex

        self.free_blossom = list(range(num_vertex, 2 * num_vertex))

        for b in range(2 * num_vertex):
            self.outer[b] = b
            self.deep[b] = [b] if b < num_vertex else []
            self.shallow[b] = []
            self.tip[b] = b
            self.active[b] = (b < num_vertex)
            self.label[b] = _Label.UNLABELED
            self.forest[b] = -1
            self.root[b] = b
            self.blocked[b] = False
            self.dual[b] = 0.0
            self.mate[b] = -1

        self.slack = self.graph.num_edge * [0.0]
        self.queue.clear()
        self.perfect = False

    def edge_blocked(self, e: int) -> bool:
        """Return True if edge "e" has positive slack."""
        return _greater(self.slack[e], 0)

    def reset(self) -> None:
        """Prepare a new alternating forest.

        Destroys all outermost blossoms that are not blocked, labels every
        unmatched outermost blossom EVEN and puts it in the queue, and marks
        all matched outermost blossoms UNLABELED.

        This function takes time O(n).
        """

        num_vertex = self.graph.num_vertex

        for b in range(2 * num_vertex):
            self.forest[b] = -1
            self.root[b] = b
            if (b >= num_vertex) and self.active[b] and (self.outer[b] == b):
                self.destroy_blossom(b)

        self.visited = (2 * num_vertex) * [False]
        self.queue.clear()

        for x in range(num_vertex):
            bx = self.outer[x]
            if self.mate[bx] == -1:
                self.label[bx] = _Label.EVEN
                if not self.visited[bx]:
                    self.queue.append(x)
                self.visited[bx] = True
            else:
                self.label[bx] = _Label.UNLABELED

    def grow(self) -> None:
        """Grow an alternating forest from all unmatched outermost blossoms.

        The forest is grown breadth-first over edges that are not blocked.
        Every augmenting path found is applied immediately, after which
        a fresh forest is started. Blossoms found in the process are
        contracted.

        On return, "perfect" tells whether every vertex is matched.
        """

        self.reset()

        graph = self.graph

        while self.queue:

            w = self.outer[self.queue.popleft()]

            # "w" may be a blossom. Scan the edges of all its vertices.
            restart = False
            for x in self.deep[w]:
                for y in graph.adjacent_vertices(x):

                    if self.edge_blocked(graph.edge_index(x, y)):
                        continue

                    bx = self.outer[x]
                    by = self.outer[y]
                    ylabel = self.label[by]

                    if ylabel == _Label.ODD:
                        continue

                    if ylabel == _Label.UNLABELED:
                        # Attach "by" and its mate to the forest.
                        ym = self.mate[by]
                        bym = self.outer[ym]

                        self.forest[by] = x
                        self.label[by] = _Label.ODD
                        self.root[by] = self.root[bx]

                        self.forest[bym] = y
                        self.label[bym] = _Label.EVEN
                        self.root[bym] = self.root[bx]

                        if not self.visited[bym]:
                            self.queue.append(ym)
                            self.visited[bym] = True

                    elif self.root[by] != self.root[bx]:
                        # EVEN blossoms in different trees.
                        self.augment(x, y)
                        self.reset()
                        restart = True
                        break

                    elif bx != by:
                        # EVEN blossoms in the same tree.
                        b = self.blossom(x, y)
                        self.queue.appendleft(b)
                        self.visited[b] = True
                        restart = True
                        break

                if restart:
                    break

        self.perfect = all(self.mate[self.outer[x]] != -1
                           for x in range(self.graph.num_vertex))

    def find_mate_edge(self, u: int, v: int) -> tuple[int, int]:
        """Find the unblocked edge of minimum index between blossoms
        "u" and "v".

        Using the minimum index ensures that expanding either side of a
        matched pair of blossoms selects the same edge.

        Returns:
            Tuple "(p, q)" of vertices with "p" in "u" and "q" in "v".
        """

        graph = self.graph

        vset = set(self.deep[v])

        best_edge = self.graph.num_edge
        p = -1
        q = -1

        for x in self.deep[u]:
            for y in graph.adjacent_vertices(x):
                if y in vset:
                    e = graph.edge_index(x, y)
                    if (e < best_edge) and (not self.edge_blocked(e)):
                        best_edge = e
                        p = x
                        q = y

        if p == -1:
            raise MatchingError(
                f"No tight edge between matched blossoms {u} and {v}")

        return (p, q)

    def expand_one(self, u: int, expand_blocked: bool) -> list[int]:
        """Update the mate of "u" and, if allowed, expand it one level.

        Returns:
            List of sub-blossoms that became outermost and must be
            expanded in turn; empty if "u" was not expanded.
        """

        num_vertex = self.graph.num_vertex

        v = self.outer[self.mate[u]]
        (p, q) = self.find_mate_edge(u, v)
        self.mate[u] = q
        self.mate[v] = p

        if (u < num_vertex) or (self.blocked[u] and not expand_blocked):
            return []

        # Rotate the circuit so that it starts at the sub-blossom
        # containing "p". That sub-blossom keeps the external mate.
        circuit = self.shallow[u]
        k = 0
        while p not in self.deep[circuit[k]]:
            k += 1
        circuit = circuit[k:] + circuit[:k]
        self.shallow[u] = circuit

        # Match the remaining sub-blossoms in pairs around the circuit.
        self.mate[circuit[0]] = self.mate[u]
        for i in range(1, len(circuit), 2):
            self.mate[circuit[i]] = circuit[i+1]
            self.mate[circuit[i+1]] = circuit[i]

        # The sub-blossoms become outermost blossoms.
        for s in circuit:
            self.outer[s] = s
            for x in self.deep[s]:
                self.outer[x] = s

        self.active[u] = False
        self.free_blossom.append(u)

        return circuit

    def expand(self, u: int, expand_blocked: bool = False) -> None:
        """Expand blossom "u" and, recursively, its sub-blossoms.

        The mates of "u" and of its matched blossom are first moved to the
        canonical edge between them. If "u" is an original vertex, or if it
        is blocked and "expand_blocked" is False, nothing else happens.
        """

        # Use an explicit stack to avoid deep recursion.
        # Sub-blossoms are visited in the same order as a recursive walk.
        stack: list[int] = [u]
        while stack:
            b = stack.pop()
            subs = self.expand_one(b, expand_blocked)
            stack.extend(reversed(subs))

    def augment(self, u: int, v: int) -> None:
        """Augment the matching along the path
        root(u) ... u, v ... root(v) in the alternating forest."""

        _logger.debug("augmenting path through edge (%d, %d)", u, v)

        p = self.outer[u]
        q = self.outer[v]

        self.mate[p] = q
        self.mate[q] = p
        self.expand(p)
        self.expand(q)

        self.augment_to_root(p)
        self.augment_to_root(q)

    def augment_to_root(self, p: int) -> None:
        """Flip matched and unmatched edges from EVEN blossom "p"
        up to the root of its alternating tree."""

        while self.forest[p] != -1:
            q = self.outer[self.forest[p]]
            p = self.outer[self.forest[q]]

            self.mate[p] = q
            self.mate[q] = p
            self.expand(p)
            self.expand(q)

    def blossom(self, u: int, v: int) -> int:
        """Contract the blossom formed by the forest paths from EVEN
        vertices "u" and "v" to their first common ancestor.

        This function takes time O(n).

        Returns:
            Index of the new blossom.
        """

        num_vertex = self.graph.num_vertex

        t = self.free_blossom.pop()

        # Mark the outermost blossoms on the path from "u" to its root.
        in_path = (2 * num_vertex) * [False]
        z = u
        while z != -1:
            in_path[self.outer[z]] = True
            z = self.forest[self.outer[z]]

        # The first marked blossom on the path from "v" is the tip.
        b = self.outer[v]
        while not in_path[b]:
            b = self.outer[self.forest[b]]
        tip = b
        self.tip[t] = tip

        # Build the odd circuit: tip ... outer(u), outer(v) ... (child of tip).
        circuit = [self.outer[u]]
        while circuit[-1] != tip:
            circuit.append(self.outer[self.forest[circuit[-1]]])
        circuit.reverse()

        b = self.outer[v]
        while b != tip:
            circuit.append(b)
            b = self.outer[self.forest[b]]

        deep: list[int] = []
        for s in circuit:
            self.outer[s] = t
            for x in self.deep[s]:
                deep.append(x)
                self.outer[x] = t

        self.shallow[t] = circuit
        self.deep[t] = deep
        self.forest[t] = self.forest[tip]
        self.label[t] = _Label.EVEN
        self.root[t] = self.root[tip]
        self.active[t] = True
        self.outer[t] = t
        self.mate[t] = self.mate[tip]
        self.dual[t] = 0.0
        self.blocked[t] = False

        return t

    def destroy_blossom(self, t: int) -> None:
        """Dissolve blossom "t" and its sub-blossoms without changing
        the matching.

        Original vertices and blocked blossoms with a positive dual
        variable are left intact.
        """

        if not self.can_destroy(t):
            return

        # Use an explicit stack to avoid deep recursion.
        stack = [(t, iter(self.shallow[t]))]
        while stack:
            (b, subs) = stack[-1]
            s = next(subs, -1)

            if s == -1:
                stack.pop()
                self.active[b] = False
                self.blocked[b] = False
                self.free_blossom.append(b)
                self.mate[b] = -1
                continue

            self.outer[s] = s
            for x in self.deep[s]:
                self.outer[x] = s

            if self.can_destroy(s):
                stack.append((s, iter(self.shallow[s])))

    def can_destroy(self, t: int) -> bool:
        """Return True if "t" is a blossom that may be dissolved."""
        return ((t >= self.graph.num_vertex)
                and not (self.blocked[t] and _greater(self.dual[t], 0)))

    def update_dual_costs(self) -> float:
        """Apply a dual step after the forest could not be grown further.

        The step is the largest change that keeps every edge slack
        non-negative and no ODD blossom dual negative. At least one edge
        becomes tight, or at least one ODD blossom becomes unblocked.

        This function takes time O(n + m).

        Returns:
            The size of the dual step.
        """

        num_vertex = self.graph.num_vertex
        edges = self.graph.edges
        outer = self.outer
        label = self.label
        slack = self.slack

        even = _Label.EVEN
        odd = _Label.ODD
        unlabeled = _Label.UNLABELED

        # delta1: least slack of an edge between EVEN and UNLABELED.
        # delta2: least slack of an edge between different EVEN blossoms.
        delta1 = math.inf
        delta2 = math.inf
        for (e, (x, y)) in enumerate(edges):
            lx = label[outer[x]]
            ly = label[outer[y]]
            if (((lx == even) and (ly == unlabeled))
                    or ((ly == even) and (lx == unlabeled))):
                if _greater(delta1, slack[e]):
                    delta1 = slack[e]
            elif (outer[x] != outer[y]) and (lx == even) and (ly == even):
                if _greater(delta2, slack[e]):
                    delta2 = slack[e]

        # delta3: least dual variable of an outermost ODD blossom.
        delta3 = math.inf
        for b in range(num_vertex, 2 * num_vertex):
            if (self.active[b]
                    and (outer[b] == b)
                    and (label[b] == odd)
                    and _greater(delta3, self.dual[b])):
                delta3 = self.dual[b]

        if delta1 < math.inf:
            delta = delta1
        elif delta2 < math.inf:
            delta = delta2
        elif delta3 < math.inf:
            delta = delta3
        else:
            raise MatchingError("No dual step possible")

        if (delta2 < math.inf) and _greater(delta, delta2 / 2):
            delta = delta2 / 2
        if (delta3 < math.inf) and _greater(delta, delta3):
            delta = delta3

        # Update dual variables of outermost blossoms.
        for b in range(2 * num_vertex):
            if (outer[b] != b) or (not self.active[b]):
                continue
            if label[b] == even:
                self.dual[b] += delta
            elif label[b] == odd:
                self.dual[b] -= delta

        # Update slack of edges between different outermost blossoms.
        for (e, (x, y)) in enumerate(edges):
            if outer[x] == outer[y]:
                continue
            lx = label[outer[x]]
            ly = label[outer[y]]
            if (lx == even) and (ly == even):
                slack[e] -= 2 * delta
            elif (lx == odd) and (ly == odd):
                slack[e] += 2 * delta
            elif (((lx == unlabeled) and (ly == even))
                    or ((ly == unlabeled) and (lx == even))):
                slack[e] -= delta
            elif (((lx == unlabeled) and (ly == odd))
                    or ((ly == unlabeled) and (lx == odd))):
                slack[e] += delta

        # Block blossoms with positive dual; open blossoms whose dual
        # dropped back to zero.
        for b in range(num_vertex, 2 * num_vertex):
            if _greater(self.dual[b], 0):
                self.blocked[b] = True
            elif self.active[b] and self.blocked[b]:
                if self.mate[b] == -1:
                    self.destroy_blossom(b)
                else:
                    self.blocked[b] = False
                    self.expand(b)

        return delta

    def heuristic(self) -> None:
        """Greedily extend the matching over edges that are not blocked.

        Vertices are visited in order of non-decreasing degree. Each
        unmatched vertex is matched to its unmatched neighbour of minimum
        degree, if any.

        This function takes time O(m + n * log(n)).
        """

        graph = self.graph
        num_vertex = graph.num_vertex
        outer = self.outer
        mate = self.mate

        degree = num_vertex * [0]
        for (e, (x, y)) in enumerate(self.graph.edges):
            if not self.edge_blocked(e):
                degree[x] += 1
                degree[y] += 1

        queue = PriorityQueue()
        for x in range(num_vertex):
            queue.insert(degree[x], x)

        while len(queue) > 0:
            x = queue.delete_min()
            if mate[outer[x]] != -1:
                continue

            best = -1
            for y in graph.adjacent_vertices(x):
                if (self.edge_blocked(graph.edge_index(x, y))
                        or (outer[x] == outer[y])
                        or (mate[outer[y]] != -1)):
                    continue
                if (best == -1) or (degree[y] < degree[best]):
                    best = y

            if best != -1:
                mate[outer[x]] = best
                mate[outer[best]] = x

    def positive_costs(self) -> float:
        """Shift all slacks such that none is negative.

        Returns:
            The amount subtracted from every slack (zero or negative).
        """

        min_slack = 0.0
        for s in self.slack:
            if _greater(min_slack - s, 0):
                min_slack = s

        if min_slack != 0:
            self.slack = [s - min_slack for s in self.slack]

        return min_slack

    def retrieve_matching(self) -> list[int]:
        """Expand all matched outermost blossoms and return the indices of
        the matched edges."""

        num_vertex = self.graph.num_vertex

        for b in range(2 * num_vertex):
            if self.active[b] and (self.mate[b] != -1) and (self.outer[b] == b):
                self.expand(b, expand_blocked=True)

        return [e for (e, (x, y)) in enumerate(self.graph.edges)
                if self.mate[x] == y]

    def dual_objective(self) -> float:
        """Return the dual objective: the sum of all vertex duals plus
        the duals of all blocked blossoms."""

        num_vertex = self.graph.num_vertex
        obj = sum(self.dual[:num_vertex])
        obj += sum(self.dual[b] for b in range(num_vertex, 2 * num_vertex)
                   if self.active[b] and self.blocked[b])
        return obj

    def num_blocked(self) -> int:
        """Return the number of live blocked blossoms."""
        return sum(1 for b in range(self.graph.num_vertex,
                                    2 * self.graph.num_vertex)
                   if self.active[b] and self.blocked[b])


class MatchingEngine:
    """Solve matching problems on a fixed graph.

    The engine allocates its working memory once, when it is created,
    and reuses it for every solve. An engine instance must not be used
    for more than one solve at a time.
    """

    def __init__(self, graph: Graph, use_heuristic: bool = True) -> None:
        """Prepare the engine for the specified graph.

        Parameters:
            graph: Input graph; must not be modified while the engine
                is in use.
            use_heuristic: Run the greedy warm start at the beginning of
                every primal-dual iteration. This only affects speed.
        """

        if not isinstance(graph, Graph):
            raise TypeError('"graph" must be a Graph instance')

        self.graph = graph
        self.use_heuristic = use_heuristic
        self.ctx = _MatchingContext(graph)

        # Dual objective of the last minimum-cost solve, in terms of the
        # original (unshifted) costs.
        self.dual_objective: Optional[float] = None

        _logger.debug("matching engine for %d vertices, %d edges",
                      graph.num_vertex, graph.num_edge)

    def solve_maximum_matching(self) -> list[int]:
        """Compute a maximum-cardinality matching.

        Returns:
            List of indices of matched edges, in increasing order.
        """

        ctx = self.ctx
        ctx.clear()
        ctx.grow()
        return ctx.retrieve_matching()

    def solve_minimum_cost_perfect_matching(
            self,
            costs: Sequence[int|float]
            ) -> tuple[list[int], float]:
        """Compute a minimum-cost perfect matching.

        Parameters:
            costs: Sequence with the cost of each edge, indexed by
                edge index.

        Returns:
            Tuple "(matching, cost)" where "matching" lists the indices of
            the matched edges in increasing order and "cost" is the sum of
            their costs.

        Raises:
            InfeasibleInstanceError: If the graph has no perfect matching.
            ValueError: If "costs" does not hold one finite number per edge.
            TypeError: If "costs" contains invalid data types.
            MatchingError: If the matching algorithm fails.
                This can only happen if there is a bug in the algorithm.
        """

        ctx = self.ctx
        num_vertex = self.graph.num_vertex

        self.dual_objective = None

        # A perfect matching must exist before costs are considered.
        self.solve_maximum_matching()
        if not ctx.perfect:
            ctx.clear()
            _logger.info("graph with %d vertices has no perfect matching",
                         num_vertex)
            raise InfeasibleInstanceError(
                "The graph does not have a perfect matching")

        _check_costs(costs, self.graph.num_edge)

        ctx.clear()
        ctx.slack = [float(c) for c in costs]
        shift = ctx.positive_costs()

        # Repeat until the matching on the contracted graph is perfect.
        #
        # Each pass either augments the matching, or changes the dual
        # solution such that a new edge becomes tight or a blocked
        # blossom opens.
        iteration = 0
        while not ctx.perfect:
            iteration += 1
            if self.use_heuristic:
                ctx.heuristic()
            ctx.grow()
            if not ctx.perfect:
                delta = ctx.update_dual_costs()
                _logger.debug("iteration %d: dual step %g, %d blocked blossoms",
                              iteration, delta, ctx.num_blocked())
            ctx.reset()

        _logger.debug("perfect matching found after %d iterations", iteration)

        # Every perfect matching has n/2 edges, so the shift adds
        # (n/2) * shift to every primal and dual value.
        dual_obj = ctx.dual_objective() + shift * num_vertex / 2

        matching = ctx.retrieve_matching()
        cost = float(sum(costs[e] for e in matching))

        # Verification is exact only when all costs are integers.
        # If the algorithm is correct, verification always passes.
        if all(float(c).is_integer() for c in costs):
            _verify_optimum(self.graph, costs, matching, ctx.slack, dual_obj)

        self.dual_objective = dual_obj
        return (matching, cost)


def _verify_optimum(
        graph: Graph,
        costs: Sequence[int|float],
        matching: list[int],
        slack: list[float],
        dual_objective: float
        ) -> None:
    """Verify that a perfect matching is optimal.

    Checks that every vertex is matched exactly once, that the dual
    solution is feasible, that all matched edges are tight, and that
    primal and dual objective are equal.

    This function takes time O(n + m).

    Raises:
        MatchingError: If the solution is not optimal.
    """

    num_vertex = graph.num_vertex
    tol = EPSILON * max(1, num_vertex)

    # Check that every vertex is covered by exactly one matched edge.
    vertex_degree = num_vertex * [0]
    for e in matching:
        (x, y) = graph.edges[e]
        vertex_degree[x] += 1
        vertex_degree[y] += 1
    for x in range(num_vertex):
        if vertex_degree[x] != 1:
            raise MatchingError(
                f"Vertex {x} is covered by {vertex_degree[x]} matched edges")

    # Check dual feasibility.
    for (e, s) in enumerate(slack):
        if s < -tol:
            raise MatchingError(f"Negative slack {s} on edge {e}")

    # Check complementary slackness of matched edges.
    for e in matching:
        if slack[e] > tol:
            raise MatchingError(f"Matched edge {e} has slack {slack[e]}")

    # Check strong duality.
    primal = sum(costs[e] for e in matching)
    if not math.isclose(primal, dual_objective, rel_tol=1e-9, abs_tol=tol):
        raise MatchingError(
            f"Primal cost {primal} differs from dual objective {dual_objective}")
