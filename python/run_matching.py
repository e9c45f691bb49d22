#!/usr/bin/env python3

"""
Calculate minimum-cost perfect matching of graphs in DIMACS format.

Input graphs use the DIMACS edge format:
    p edge N M      (once, before any edge)
    e X Y COST      (M times; vertices numbered 1 .. N)

Solutions are written as:
    s COST
    m X Y           (one line per matched edge)
"""

from __future__ import annotations

import sys
import argparse
import logging
import math
import os.path
from collections.abc import Iterator
from typing import NamedTuple, Optional, TextIO

from mcpmatching import (minimum_cost_perfect_matching,
                         maximum_cardinality_matching,
                         Graph,
                         MatchingError,
                         InfeasibleInstanceError)


_logger = logging.getLogger("run_matching")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DimacsGraph(NamedTuple):
    """Graph instance as declared by a DIMACS file."""
    num_vertex: int
    edges: list[tuple[int, int, int|float]]


class Solution(NamedTuple):
    """Matching with its total cost; vertices are 0-based."""
    cost: int|float
    pairs: list[tuple[int, int]]


def _records(f: TextIO) -> Iterator[tuple[int, list[str]]]:
    """Yield "(line_number, words)" for each non-empty, non-comment line."""
    for (lineno, line) in enumerate(f, start=1):
        words = line.split()
        if words and (not words[0].startswith("c")):
            yield (lineno, words)


def _number(word: str, lineno: int) -> int|float:
    """Parse a cost, keeping integers exact."""
    try:
        return int(word)
    except ValueError:
        pass
    try:
        value = float(word)
    except ValueError:
        raise ValueError(f"line {lineno}: invalid number {word!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"line {lineno}: cost must be finite")
    return value


def _vertex(word: str, num_vertex: int, lineno: int) -> int:
    """Parse a 1-based vertex number and return its 0-based index."""
    try:
        x = int(word)
    except ValueError:
        raise ValueError(f"line {lineno}: invalid vertex {word!r}") from None
    if not 1 <= x <= num_vertex:
        raise ValueError(
            f"line {lineno}: vertex {x} outside range 1 .. {num_vertex}")
    return x - 1


def read_dimacs_graph(f: TextIO) -> DimacsGraph:
    """Read a graph in DIMACS edge format.

    The problem line is required. Edge endpoints must lie within the
    declared vertex range and the number of edges must match the
    declared count.
    """

    header: Optional[tuple[int, int]] = None
    edges: list[tuple[int, int, int|float]] = []

    for (lineno, words) in _records(f):
        kind = words[0]

        if kind == "p":
            if header is not None:
                raise ValueError(f"line {lineno}: duplicate problem line")
            if (len(words) != 4) or (words[1] != "edge"):
                raise ValueError(
                    f"line {lineno}: expecting 'p edge N M'")
            try:
                header = (int(words[2]), int(words[3]))
            except ValueError:
                raise ValueError(
                    f"line {lineno}: invalid problem size") from None
            if min(header) < 0:
                raise ValueError(f"line {lineno}: invalid problem size")

        elif kind == "e":
            if header is None:
                raise ValueError(f"line {lineno}: edge before problem line")
            if len(words) != 4:
                raise ValueError(f"line {lineno}: expecting 'e X Y COST'")
            x = _vertex(words[1], header[0], lineno)
            y = _vertex(words[2], header[0], lineno)
            edges.append((x, y, _number(words[3], lineno)))

        else:
            raise ValueError(f"line {lineno}: unknown line type {kind!r}")

    if header is None:
        raise ValueError("missing problem line")

    (num_vertex, num_edge) = header
    if len(edges) != num_edge:
        raise ValueError(
            f"problem line declares {num_edge} edges but found {len(edges)}")

    return DimacsGraph(num_vertex, edges)


def read_dimacs_solution(f: TextIO, num_vertex: int) -> Solution:
    """Read a matching in DIMACS solution format."""

    cost: Optional[int|float] = None
    pairs: list[tuple[int, int]] = []

    for (lineno, words) in _records(f):
        kind = words[0]

        if kind == "s":
            if cost is not None:
                raise ValueError(f"line {lineno}: duplicate solution line")
            if len(words) != 2:
                raise ValueError(f"line {lineno}: expecting 's COST'")
            cost = _number(words[1], lineno)

        elif kind == "m":
            if len(words) != 3:
                raise ValueError(f"line {lineno}: expecting 'm X Y'")
            pairs.append((_vertex(words[1], num_vertex, lineno),
                          _vertex(words[2], num_vertex, lineno)))

        else:
            raise ValueError(f"line {lineno}: unknown line type {kind!r}")

    if cost is None:
        raise ValueError("missing solution line")

    return Solution(cost, pairs)


def write_dimacs_solution(f: TextIO, solution: Solution) -> None:
    """Write a matching in DIMACS solution format."""

    cost = solution.cost
    if isinstance(cost, float) and cost.is_integer():
        cost = int(cost)
    print("s", cost if isinstance(cost, int) else f"{cost:.12g}", file=f)

    for (x, y) in solution.pairs:
        print("m", x + 1, y + 1, file=f)


def matching_cost(
        instance: DimacsGraph,
        pairs: list[tuple[int, int]],
        perfect: bool
        ) -> int|float:
    """Check that "pairs" is a matching of the graph and return its cost.

    Raises:
        ValueError: If a pair is not an edge, a vertex is matched twice,
            or "perfect" is set and some vertex is unmatched.
    """

    graph = Graph(instance.num_vertex,
                  [(x, y) for (x, y, _c) in instance.edges])

    matched = instance.num_vertex * [False]
    cost: int|float = 0

    for (x, y) in pairs:
        if not graph.is_adjacent(x, y):
            raise ValueError(f"matched pair ({x+1}, {y+1}) is not an edge")
        for v in (x, y):
            if matched[v]:
                raise ValueError(f"vertex {v+1} is matched more than once")
            matched[v] = True
        cost += instance.edges[graph.edge_index(x, y)][2]

    if perfect and not all(matched):
        raise ValueError(f"vertex {matched.index(False)+1} is not matched")

    return cost


def solve(instance: DimacsGraph, maxcard: bool) -> Solution:
    """Calculate the matching of one graph instance.

    Raises:
        InfeasibleInstanceError: If a perfect matching is requested and
            the graph does not have one.
    """

    if maxcard:
        pairs = maximum_cardinality_matching(
            instance.edges, num_vertex=instance.num_vertex)
    else:
        (pairs, _cost) = minimum_cost_perfect_matching(
            instance.edges, num_vertex=instance.num_vertex)

    _logger.debug("matched %d pairs on %d vertices",
                  len(pairs), instance.num_vertex)

    # Sum the input costs exactly; the solver works in floating point.
    cost = matching_cost(instance, pairs, perfect=(not maxcard))
    return Solution(cost, pairs)


def _read_graph_file(filename: str) -> DimacsGraph:
    if not filename:
        return read_dimacs_graph(sys.stdin)
    with open(filename, "r", encoding="ascii") as f:
        try:
            return read_dimacs_graph(f)
        except ValueError as exc:
            raise ValueError(f"{filename}: {exc}") from None


def _solution_filename(filename: str, outdir: Optional[str]) -> str:
    base = os.path.splitext(filename)[0] + ".out"
    if outdir:
        return os.path.join(outdir, os.path.basename(base))
    return base


def run_solve(filenames: list[str], outdir: Optional[str],
              maxcard: bool) -> int:
    """Solve each input and write the solution to stdout or "outdir"."""

    for filename in (filenames or [""]):
        instance = _read_graph_file(filename)
        _logger.debug("read %r: %d vertices, %d edges",
                      filename or "(stdin)", instance.num_vertex,
                      len(instance.edges))

        try:
            solution = solve(instance, maxcard)
        except InfeasibleInstanceError:
            raise InfeasibleInstanceError(
                f"{filename or '(stdin)'}: graph has no perfect matching"
                ) from None

        if outdir:
            output_filename = _solution_filename(filename, outdir)
            with open(output_filename, "x", encoding="ascii") as f:
                write_dimacs_solution(f, solution)
            print(f"{filename} -> {output_filename}")
        else:
            write_dimacs_solution(sys.stdout, solution)

    return 0


def verify_one(filename: str, maxcard: bool) -> Optional[str]:
    """Compare the solver against the reference solution of one graph.

    The reference solution is read from the ".out" file next to the
    input. It must itself be a valid matching of the declared graph
    (a perfect matching unless "maxcard" is set) with the stated cost.

    Returns:
        None if the solver agrees with the reference, otherwise a
        description of the difference.
    """

    instance = _read_graph_file(filename)

    reference_filename = _solution_filename(filename, None)
    with open(reference_filename, "r", encoding="ascii") as f:
        try:
            reference = read_dimacs_solution(f, instance.num_vertex)
        except ValueError as exc:
            raise ValueError(f"{reference_filename}: {exc}") from None

    try:
        reference_cost = matching_cost(instance, reference.pairs,
                                       perfect=(not maxcard))
    except ValueError as exc:
        return f"reference solution is invalid: {exc}"

    if maxcard:
        try:
            solution = solve(instance, maxcard)
        except InfeasibleInstanceError:
            return "graph has no perfect matching"
        if len(solution.pairs) != len(reference.pairs):
            return (f"got {len(solution.pairs)} pairs,"
                    f" expected {len(reference.pairs)}")
        return None

    if not math.isclose(reference_cost, reference.cost,
                        rel_tol=1e-9, abs_tol=1e-9):
        return (f"reference solution states cost {reference.cost}"
                f" but its edges cost {reference_cost}")

    try:
        solution = solve(instance, maxcard)
    except InfeasibleInstanceError:
        return "graph has no perfect matching"

    if not math.isclose(solution.cost, reference.cost,
                        rel_tol=1e-9, abs_tol=1e-9):
        return f"got cost {solution.cost}, expected {reference.cost}"

    return None


def run_verify(filenames: list[str], maxcard: bool) -> int:
    """Verify each input against its reference solution."""

    failed = 0
    for filename in filenames:
        problem = verify_one(filename, maxcard)
        if problem is None:
            print(f"{filename}: OK")
        else:
            print(f"{filename}: FAILED ({problem})")
            failed += 1

    print(f"{len(filenames) - failed} passed, {failed} failed")
    return 1 if failed else 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main program."""

    parser = argparse.ArgumentParser(
        description="Calculate minimum-cost perfect matching"
                    " of graphs in DIMACS format.")
    parser.add_argument("--verify",
                        action="store_true",
                        help="compare against the .out file of each input")
    parser.add_argument("--maxcard",
                        action="store_true",
                        help="calculate maximum-cardinality matching")
    parser.add_argument("--outdir",
                        help="write one .out file per input to this directory")
    parser.add_argument("--verbose",
                        action="store_true",
                        help="write debug messages to stderr")
    parser.add_argument("input",
                        nargs="*",
                        help="input file(s); leave empty to read from stdin")

    args = parser.parse_args(argv)

    logging.basicConfig(
        format=LOG_FORMAT,
        level=(logging.DEBUG if args.verbose else logging.WARNING))

    if args.verify and (not args.input):
        print("ERROR: --verify needs input files", file=sys.stderr)
        return 1
    if (len(args.input) > 1) and (not args.verify) and (not args.outdir):
        print("ERROR: multiple inputs need --outdir or --verify",
              file=sys.stderr)
        return 1

    try:
        if args.verify:
            return run_verify(args.input, args.maxcard)
        return run_solve(args.input, args.outdir, args.maxcard)
    except (OSError, ValueError, TypeError, MatchingError) as exc:
        print("ERROR:", exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
