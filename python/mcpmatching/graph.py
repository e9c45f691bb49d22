"""
Read-only representation of an undirected graph for the matching engine.
"""

from __future__ import annotations

from collections.abc import Sequence


class Graph:
    """Representation of the input graph.

    Vertices are indexed by integers in range 0 .. n-1.
    Edges are indexed by integers in range 0 .. m-1, in the order in which
    they were passed to the constructor.

    These data remain unchanged while a matching algorithm runs.
    """

    def __init__(
            self,
            num_vertex: int,
            edges: Sequence[tuple[int, int]]
            ) -> None:
        """Initialize the graph and prepare adjacency information.

        This function takes time O(n + m * log(m)).

        Parameters:
            num_vertex: Number of vertices.
            edges: Sequence of edges, each edge specified as a pair "(x, y)"
                of vertex indices.

        Raises:
            ValueError: If the input does not satisfy the constraints.
            TypeError: If the input contains invalid data types.
        """

        if not isinstance(num_vertex, int):
            raise TypeError('"num_vertex" must be an integer')
        if num_vertex < 0:
            raise ValueError('"num_vertex" must be non-negative')

        _check_edge_types(num_vertex, edges)
        _check_edge_structure(edges)

        self.num_vertex: int = num_vertex

        # "edges[e] = (x, y)" where
        #     "e" is an edge index;
        #     "x" and "y" are vertex indices of the incident vertices.
        self.edges: list[tuple[int, int]] = [(x, y) for (x, y) in edges]

        # "adjacent[x]" is the list of neighbours of vertex "x",
        # in order of increasing edge index.
        self.adjacent: list[list[int]] = [[] for _x in range(num_vertex)]

        # "edge_map[(x, y)]" is the index of the edge between "x" and "y".
        # Both orientations are stored.
        self.edge_map: dict[tuple[int, int], int] = {}

        for (e, (x, y)) in enumerate(self.edges):
            self.adjacent[x].append(y)
            self.adjacent[y].append(x)
            self.edge_map[(x, y)] = e
            self.edge_map[(y, x)] = e

    @classmethod
    def from_edges(cls, edges: Sequence[tuple[int, int]]) -> Graph:
        """Create a graph with just enough vertices to hold all edges."""
        if edges:
            num_vertex = 1 + max(max(x, y) for (x, y) in edges)
        else:
            num_vertex = 0
        return cls(num_vertex, edges)

    @property
    def num_edge(self) -> int:
        """Return the number of edges."""
        return len(self.edges)

    def edge(self, e: int) -> tuple[int, int]:
        """Return the endpoints of the edge with index "e"."""
        return self.edges[e]

    def edge_index(self, x: int, y: int) -> int:
        """Return the index of the edge between vertices "x" and "y".

        Raises:
            KeyError: If "x" and "y" are not adjacent.
        """
        return self.edge_map[(x, y)]

    def adjacent_vertices(self, x: int) -> list[int]:
        """Return the neighbours of vertex "x"."""
        return self.adjacent[x]

    def is_adjacent(self, x: int, y: int) -> bool:
        """Return True if there is an edge between "x" and "y"."""
        return (x, y) in self.edge_map

    def __repr__(self) -> str:
        return f"Graph(num_vertex={self.num_vertex}, num_edge={self.num_edge})"


def _check_edge_types(
        num_vertex: int,
        edges: Sequence[tuple[int, int]]
        ) -> None:
    """Check that edges are pairs of valid vertex indices.

    This function takes time O(m).
    """

    if not isinstance(edges, Sequence):
        raise TypeError('"edges" must be a sequence')

    for e in edges:
        if (not isinstance(e, tuple)) or (len(e) != 2):
            raise TypeError("Each edge must be specified as a 2-tuple")

        (x, y) = e

        if (not isinstance(x, int)) or (not isinstance(y, int)):
            raise TypeError("Edge endpoints must be integers")

        if (x < 0) or (y < 0):
            raise ValueError("Edge endpoints must be non-negative integers")

        if (x >= num_vertex) or (y >= num_vertex):
            raise ValueError(
                f"Edge {e} refers to a vertex outside range 0 .. {num_vertex-1}")


def _check_edge_structure(edges: Sequence[tuple[int, int]]) -> None:
    """Check that the graph has no self-edges and no multi-edges.

    This function takes time O(m * log(m)).
    """

    for (x, y) in edges:
        if x == y:
            raise ValueError("Self-edges are not supported")

    edge_endpoints = [((x, y) if (x < y) else (y, x)) for (x, y) in edges]
    edge_endpoints.sort()

    for i in range(len(edge_endpoints) - 1):
        if edge_endpoints[i] == edge_endpoints[i+1]:
            raise ValueError(f"Duplicate edge {edge_endpoints[i]}")
