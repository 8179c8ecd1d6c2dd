#!/usr/bin/env python3
"""
Solve a Sudoku puzzle by encoding it to CNF and running the DPLL solver.

The puzzle is N lines of N integers (0 or '.' = empty), separated by spaces
and/or commas. Use '-' to read it from stdin, or --example for the built-in
9x9 puzzle. With --cnf the input is a DIMACS file and the solver runs on it
directly.

Usage:
  sudoku-sat puzzles/example_n9.txt
  sudoku-sat --example --show-filled --timeout 60
  sudoku-sat puzzle.txt --dimacs puzzle.cnf
  sudoku-sat --cnf formula.cnf

Exit codes: 0 solved, 1 unsatisfiable, 2 bad input, 3 timeout,
4 the solver returned an assignment that is not a valid solution.
"""
from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

from . import solver as solver_mod
from .codec import decode
from .dimacs import format_model, read_dimacs, save_dimacs
from .encoder import encode_grid
from .grid import EXAMPLE_PUZZLE, Grid, assignment_to_grid, count_clues, format_grid, parse_grid, read_grid, verify_solution
from .timeout import Timeout, time_limit

EXIT_SAT = 0
EXIT_UNSAT = 1
EXIT_INPUT = 2
EXIT_TIMEOUT = 3
EXIT_INVALID = 4


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Solve Sudoku puzzles with a DPLL SAT solver.")
    source = ap.add_mutually_exclusive_group(required=True)
    source.add_argument("puzzle", nargs="?", help="Path to puzzle .txt ('-' for stdin)")
    source.add_argument("--example", action="store_true", help="Solve the built-in 9x9 example puzzle")
    source.add_argument("--cnf", metavar="PATH", help="Solve a DIMACS CNF file instead of a puzzle")
    ap.add_argument("--extended", action="store_true", help="Add redundant clauses (at most one value per cell, every value in every group)")
    ap.add_argument("--heuristic", choices=solver_mod.HEURISTICS, default="mrv", help="Branching variable selection")
    ap.add_argument("--pure-literals", action="store_true", help="Enable pure literal elimination")
    ap.add_argument("--timeout", type=float, default=None, help="Wall-clock limit in seconds (Unix only)")
    ap.add_argument("--dimacs", metavar="PATH", help="Also write the encoded puzzle as DIMACS CNF")
    ap.add_argument("--show-assignments", action="store_true", help="Print every variable assignment")
    ap.add_argument("--show-filled", action="store_true", help="Print the values placed in originally empty cells")
    args = ap.parse_args(argv)
    if args.cnf and (args.extended or args.dimacs):
        ap.error("--extended and --dimacs apply to puzzles, not to --cnf")
    return args


def _load_puzzle(args: argparse.Namespace) -> Grid:
    if args.example:
        return [row[:] for row in EXAMPLE_PUZZLE]
    if args.puzzle == "-":
        return parse_grid(sys.stdin)
    return read_grid(args.puzzle)


def _print_assignments(assignment, n: int) -> None:
    print("Assignments:")
    for variable in sorted(assignment):
        row, col, num = decode(variable, n)
        print(f"Var: {variable} Assigned: {assignment[variable]} => Cell: ({row}, {col}) Number: {num}")


def _print_filled(puzzle: Grid, solution: Grid) -> None:
    print("Solved values for originally empty cells:")
    for r, row in enumerate(puzzle):
        for c, v in enumerate(row):
            if v == 0:
                print(f"Cell at Row: {r + 1}, Column: {c + 1} was solved with value: {solution[r][c]}")


def solve_dimacs(args: argparse.Namespace) -> int:
    clauses, num_vars = read_dimacs(args.cnf)
    started = time.perf_counter()
    try:
        with time_limit(args.timeout):
            status, model = solver_mod.solve_cnf(clauses, num_vars, heuristic=args.heuristic, pure_literals=args.pure_literals)
    except Timeout:
        print("s UNKNOWN")
        print(f"c timed out after {time.perf_counter() - started:.3f}s", file=sys.stderr)
        return EXIT_TIMEOUT
    print("s SATISFIABLE" if status == "SAT" else "s UNSATISFIABLE")
    if model is not None:
        print(format_model(model))
    print(f"c solved in {time.perf_counter() - started:.3f}s")
    return EXIT_SAT if status == "SAT" else EXIT_UNSAT


def solve_puzzle(args: argparse.Namespace) -> int:
    puzzle = _load_puzzle(args)
    n = len(puzzle)
    clauses, num_vars = encode_grid(puzzle, extended=args.extended)
    print(f"N={n}, clues={count_clues(puzzle)}, variables={num_vars}, clauses={len(clauses)}")
    print(format_grid(puzzle))
    print()

    if args.dimacs:
        save_dimacs(clauses, num_vars, args.dimacs, comments=[f"sudoku N={n}"])
        print(f"Saved CNF -> {args.dimacs}")

    started = time.perf_counter()
    try:
        with time_limit(args.timeout):
            assignment = solver_mod.solve(clauses, num_vars, heuristic=args.heuristic, pure_literals=args.pure_literals)
    except Timeout:
        print(f"Timed out after {time.perf_counter() - started:.3f} seconds", file=sys.stderr)
        return EXIT_TIMEOUT
    elapsed = time.perf_counter() - started

    solution = None if assignment is None else assignment_to_grid(assignment, n)
    if assignment is not None and (solution is None or not verify_solution(solution, puzzle)):
        print("error: solver returned an assignment that does not decode to a valid grid", file=sys.stderr)
        return EXIT_INVALID

    print(f"Solvable: {solution is not None}")
    print(f"Time taken: {elapsed:.3f} seconds")
    if solution is None:
        print("No solution found.")
        return EXIT_UNSAT

    if args.show_assignments:
        _print_assignments(assignment, n)
    if args.show_filled:
        _print_filled(puzzle, solution)
    print(format_grid(solution))
    return EXIT_SAT


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        if args.cnf:
            return solve_dimacs(args)
        return solve_puzzle(args)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT


if __name__ == "__main__":
    sys.exit(main())
