"""Unit tests for the DIMACS command line tool."""

import io
import os
import os.path
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

import run_matching
from run_matching import DimacsGraph, Solution


FOUR_CYCLE = """c four-cycle with unit costs
p edge 4 4
e 1 2 1
e 2 3 1

e 3 4 1
e 4 1 1
"""

COMPLETE4 = """p edge 4 6
e 1 2 1
e 3 4 1
e 1 3 5
e 1 4 5
e 2 3 5
e 2 4 5
"""

# Vertices 3 and 4 are declared but have no edges.
ISOLATED = """p edge 4 1
e 1 2 5
"""


def read_graph(text):
    return run_matching.read_dimacs_graph(io.StringIO(text))


class TestDimacs(unittest.TestCase):
    """Test reading and writing DIMACS files."""

    def test10_read_graph(self):
        self.assertEqual(
            read_graph(FOUR_CYCLE),
            DimacsGraph(4, [(0, 1, 1), (1, 2, 1), (2, 3, 1), (3, 0, 1)]))

    def test11_read_graph_isolated(self):
        """declared vertex count is kept"""
        self.assertEqual(read_graph(ISOLATED), DimacsGraph(4, [(0, 1, 5)]))

    def test12_read_graph_float(self):
        instance = read_graph("p edge 2 1\ne 2 1 0.25\n")
        self.assertEqual(instance.edges, [(1, 0, 0.25)])

    def test_fail_read_graph(self):
        bad_inputs = [
            "",
            "e 1 2 1\n",
            "p matching 2 1\ne 1 2 1\n",
            "p edge 2\n",
            "p edge 2 1\np edge 2 1\ne 1 2 1\n",
            "p edge 2 1\ne 1 2\n",
            "p edge 2 1\ne 0 2 1\n",
            "p edge 2 1\ne 1 3 1\n",
            "p edge 2 1\ne 1 2 x\n",
            "p edge 2 1\ne 1 2 inf\n",
            "p edge 2 2\ne 1 2 1\n",
            "p edge 3 1\ne 1 2 1\ne 2 3 1\n",
            "p edge 2 1\nx 1 2 1\n"]
        for text in bad_inputs:
            with self.assertRaises(ValueError):
                read_graph(text)

    def test20_read_solution(self):
        solution = run_matching.read_dimacs_solution(
            io.StringIO("c solution\ns 2\nm 1 2\nm 3 4\n"), 4)
        self.assertEqual(solution, Solution(2, [(0, 1), (2, 3)]))

    def test_fail_read_solution(self):
        bad_inputs = ["m 1 2\n", "s 1\ns 2\n", "s 1\nm 1\n", "s 1\nm 1 5\n"]
        for text in bad_inputs:
            with self.assertRaises(ValueError):
                run_matching.read_dimacs_solution(io.StringIO(text), 4)

    def test30_write_solution(self):
        f = io.StringIO()
        run_matching.write_dimacs_solution(f, Solution(2.0, [(0, 1), (2, 3)]))
        self.assertEqual(f.getvalue(), "s 2\nm 1 2\nm 3 4\n")

        f = io.StringIO()
        run_matching.write_dimacs_solution(f, Solution(0.5, [(1, 0)]))
        self.assertEqual(f.getvalue(), "s 0.5\nm 2 1\n")


class TestSolve(unittest.TestCase):
    """Test matching_cost() and solve()."""

    def test10_matching_cost(self):
        instance = DimacsGraph(4, [(0, 1, 3), (1, 2, 4), (2, 3, 5)])
        self.assertEqual(
            run_matching.matching_cost(instance, [(2, 3), (1, 0)], True), 8)
        self.assertEqual(
            run_matching.matching_cost(instance, [(1, 2)], False), 4)

    def test_fail_matching_cost(self):
        instance = DimacsGraph(4, [(0, 1, 3), (1, 2, 4), (2, 3, 5)])
        with self.assertRaises(ValueError):
            run_matching.matching_cost(instance, [(0, 2)], False)
        with self.assertRaises(ValueError):
            run_matching.matching_cost(instance, [(0, 1), (1, 2)], False)
        with self.assertRaises(ValueError):
            run_matching.matching_cost(instance, [(1, 2)], True)

    def test20_solve(self):
        instance = read_graph(COMPLETE4)
        self.assertEqual(run_matching.solve(instance, False),
                         Solution(2, [(0, 1), (2, 3)]))
        solution = run_matching.solve(instance, True)
        self.assertEqual(len(solution.pairs), 2)

    def test21_solve_isolated(self):
        instance = read_graph(ISOLATED)
        with self.assertRaises(run_matching.InfeasibleInstanceError):
            run_matching.solve(instance, False)
        self.assertEqual(run_matching.solve(instance, True),
                         Solution(5, [(0, 1)]))


class TestMain(unittest.TestCase):
    """Run the command line tool on files in a temporary directory."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, name, text):
        filename = os.path.join(self.tmpdir.name, name)
        with open(filename, "w", encoding="ascii") as f:
            f.write(text)
        return filename

    def _main(self, argv):
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = run_matching.main(argv)
        return (status, out.getvalue(), err.getvalue())

    def test10_solve_to_stdout(self):
        input_filename = self._write("complete4.edge", COMPLETE4)
        (status, out, err) = self._main([input_filename])
        self.assertEqual(status, 0)
        self.assertEqual(out, "s 2\nm 1 2\nm 3 4\n")
        self.assertEqual(err, "")

    def test11_solve_and_verify(self):
        input_filename = self._write("complete4.edge", COMPLETE4)

        (status, _out, _err) = self._main(
            ["--outdir", self.tmpdir.name, input_filename])
        self.assertEqual(status, 0)

        output_filename = os.path.join(self.tmpdir.name, "complete4.out")
        with open(output_filename, "r", encoding="ascii") as f:
            self.assertEqual(f.read(), "s 2\nm 1 2\nm 3 4\n")

        (status, out, _err) = self._main(["--verify", input_filename])
        self.assertEqual(status, 0)
        self.assertIn("1 passed, 0 failed", out)

    def test12_isolated_vertices(self):
        """declared vertices without edges make the graph infeasible"""
        input_filename = self._write("isolated.edge", ISOLATED)
        (status, out, err) = self._main([input_filename])
        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertIn("ERROR", err)
        self.assertIn("no perfect matching", err)

    def test13_isolated_vertices_maxcard(self):
        input_filename = self._write("isolated.edge", ISOLATED)
        (status, out, _err) = self._main(["--maxcard", input_filename])
        self.assertEqual(status, 0)
        self.assertEqual(out, "s 5\nm 1 2\n")

    def test20_verify_wrong_cost(self):
        input_filename = self._write("cycle.edge", FOUR_CYCLE)
        self._write("cycle.out", "s 3\nm 1 2\nm 3 4\n")
        (status, out, _err) = self._main(["--verify", input_filename])
        self.assertEqual(status, 1)
        self.assertIn("FAILED", out)
        self.assertIn("reference solution", out)

    def test21_verify_suboptimal_reference(self):
        input_filename = self._write("complete4.edge", COMPLETE4)
        self._write("complete4.out", "s 10\nm 1 3\nm 2 4\n")
        (status, out, _err) = self._main(["--verify", input_filename])
        self.assertEqual(status, 1)
        self.assertIn("got cost 2, expected 10", out)

    def test22_verify_reference_not_perfect(self):
        input_filename = self._write("cycle.edge", FOUR_CYCLE)
        self._write("cycle.out", "s 1\nm 1 2\n")
        (status, out, _err) = self._main(["--verify", input_filename])
        self.assertEqual(status, 1)
        self.assertIn("vertex 3 is not matched", out)

    def test23_verify_infeasible(self):
        input_filename = self._write("isolated.edge", ISOLATED)
        self._write("isolated.out", "s 5\nm 1 2\n")
        (status, out, _err) = self._main(["--verify", input_filename])
        self.assertEqual(status, 1)
        self.assertIn("FAILED", out)
        (status, out, _err) = self._main(
            ["--verify", "--maxcard", input_filename])
        self.assertEqual(status, 0)

    def test_fail_missing_file(self):
        (status, _out, err) = self._main(
            [os.path.join(self.tmpdir.name, "missing.edge")])
        self.assertEqual(status, 1)
        self.assertIn("ERROR", err)

    def test_fail_bad_file(self):
        input_filename = self._write("bad.edge", "p edge 2 1\ne 1 3 1\n")
        (status, _out, err) = self._main([input_filename])
        self.assertEqual(status, 1)
        self.assertIn("bad.edge", err)

    def test_fail_multiple_inputs_need_outdir(self):
        a = self._write("a.edge", FOUR_CYCLE)
        b = self._write("b.edge", COMPLETE4)
        (status, _out, err) = self._main([a, b])
        self.assertEqual(status, 1)
        self.assertIn("--outdir", err)


if __name__ == "__main__":
    unittest.main()
