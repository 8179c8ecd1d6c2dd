#!/usr/bin/env python3
"""
Validator for the Sudoku CNF encoder.

Sanity checks for a puzzle:
- num_vars == N^3
- clause count matches formula: N^2 + 3*N^2*C(N,2) + K
  (plus N^2*C(N,2) + 3*N^2 with --extended), where K is the number of
  non-zero clues
- unit clause count == K and units correspond exactly to clue literals var(r,c,v)
- all literal ids are within [1..num_vars] in absolute value

Usage:
  sudoku-sat-validate --in puzzle.txt [--extended]

Exits with code 0 on PASS, non-zero on FAIL.
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional, Tuple

from .codec import encode
from .encoder import encode_grid
from .grid import Grid, count_clues, read_grid


def expected_counts(N: int, K: int, extended: bool = False) -> Tuple[int, int]:
    num_vars = N ** 3
    pairs = (N * (N - 1)) // 2
    # at-least-one per cell, then pairwise exclusion for rows, columns, blocks
    total_clauses = N * N + 3 * N * N * pairs + K
    if extended:
        # at-most-one per cell, at-least-one per (group, value)
        total_clauses += N * N * pairs + 3 * N * N
    return num_vars, total_clauses


def validate_grid_encoding(grid: Grid, extended: bool = False) -> Tuple[bool, List[str]]:
    """Encode `grid` and return (all_ok, report_lines)."""
    N = len(grid)
    K = count_clues(grid)
    clauses, num_vars = encode_grid(grid, extended=extended)

    # 1) num_vars
    exp_vars, exp_clauses = expected_counts(N, K, extended)
    ok_vars = (num_vars == exp_vars)

    # 2) clause count
    ok_clause_count = (len(clauses) == exp_clauses)

    # 3) units match clues exactly
    units = [cl for cl in clauses if len(cl) == 1]
    ok_unit_count = (len(units) == K)
    required_units = set()
    for r in range(N):
        for c in range(N):
            v = grid[r][c]
            if v != 0:
                required_units.add(encode(r + 1, c + 1, v, N))
    present_units = set(lit for [lit] in units)
    ok_unit_membership = (present_units == required_units)

    # 4) literal ranges valid
    ok_ranges = all(1 <= abs(lit) <= num_vars for cl in clauses for lit in cl)

    all_ok = ok_vars and ok_clause_count and ok_unit_count and ok_unit_membership and ok_ranges

    report = [
        "Validator report:",
        f"  N={N}, clues K={K}, extended={extended}",
        f"  num_vars: got {num_vars}, expected {exp_vars} -> {'OK' if ok_vars else 'FAIL'}",
        f"  clause count: got {len(clauses)}, expected {exp_clauses} -> {'OK' if ok_clause_count else 'FAIL'}",
        f"  unit clauses: got {len(units)}, expected {K} -> {'OK' if ok_unit_count else 'FAIL'}",
        f"  unit membership (matches clues): {'OK' if ok_unit_membership else 'FAIL'}",
        f"  literal ranges within [1..num_vars]: {'OK' if ok_ranges else 'FAIL'}",
        "Result: PASS" if all_ok else "Result: FAIL",
    ]
    return all_ok, report


def validate(puzzle_path: str, extended: bool = False) -> int:
    grid = read_grid(puzzle_path)
    all_ok, report = validate_grid_encoding(grid, extended)
    print("\n".join(report))
    return 0 if all_ok else 2


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Sanity-check the CNF encoding of a puzzle.")
    ap.add_argument("--in", dest="inp", required=True, help="Path to puzzle .txt")
    ap.add_argument("--extended", action="store_true", help="Validate the encoding with redundant clauses")
    args = ap.parse_args(argv)
    try:
        return validate(args.inp, args.extended)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
