"""
Puzzle grids: parsing, validation, rendering and model decoding.

A grid is an N x N list of lists with values in 0..N, where 0 marks an
empty cell and N is a perfect square (4, 9, 16, ...).
"""
from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Optional, TextIO

from .codec import decode

Grid = List[List[int]]

# The puzzle the command line solves with --example.
EXAMPLE_PUZZLE: Grid = [
    [0, 2, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 6, 0, 0, 0, 0, 3],
    [0, 7, 4, 0, 8, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 3, 0, 0, 2],
    [0, 8, 0, 0, 4, 0, 0, 1, 0],
    [6, 0, 0, 5, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 1, 0, 7, 8, 0],
    [5, 0, 0, 0, 0, 9, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 4, 0],
]

_SEPARATORS = re.compile(r"[\s,]+")


def box_size(n: int) -> int:
    b = int(math.isqrt(n))
    if b * b != n:
        raise ValueError(f"N must be a perfect square; got N={n}")
    return b


def validate_grid(grid: Grid) -> int:
    """Check shape and value ranges; return N."""
    if not grid:
        raise ValueError("Empty puzzle")
    n = len(grid)
    for r, row in enumerate(grid):
        if len(row) != n:
            raise ValueError(f"Puzzle must be N x N; row {r + 1} has length {len(row)} for N={n}")
    box_size(n)
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if v < 0 or v > n:
                raise ValueError(f"Cell ({r + 1},{c + 1}) has value {v} outside allowed range 0..{n}")
    return n


def parse_grid(lines: Iterable[str]) -> Grid:
    """Parse whitespace/comma separated rows; '.' counts as an empty cell."""
    grid: Grid = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        tokens = [t for t in _SEPARATORS.split(line) if t]
        try:
            grid.append([0 if t == "." else int(t) for t in tokens])
        except ValueError:
            raise ValueError(f"Row {len(grid) + 1} is not a list of integers: {line!r}") from None
    validate_grid(grid)
    return grid


def read_grid(path: str) -> Grid:
    with open(path, "r") as f:
        return parse_grid(f)


def write_grid(grid: Grid, stream: TextIO) -> None:
    for row in grid:
        stream.write(" ".join(str(x) for x in row) + "\n")


def format_grid(grid: Grid) -> str:
    """Render a grid with block separators, 0 shown as '.'."""
    n = len(grid)
    b = box_size(n)
    width = len(str(n))
    lines: List[str] = []
    for r, row in enumerate(grid):
        if r and r % b == 0:
            lines.append("+".join("-" * ((width + 1) * b + 1) for _ in range(b)))
        cells = [str(v).rjust(width) if v else ".".rjust(width) for v in row]
        blocks = [" ".join(cells[i:i + b]) for i in range(0, n, b)]
        lines.append(" " + " | ".join(blocks))
    return "\n".join(lines)


def count_clues(grid: Grid) -> int:
    return sum(1 for row in grid for v in row if v != 0)


def assignment_to_grid(assignment: Dict[int, bool], n: int) -> Optional[Grid]:
    """Decode the true variables of an assignment; None if a cell is empty or ambiguous."""
    return model_to_grid([v if value else -v for v, value in assignment.items()], n)


def model_to_grid(model: Iterable[int], n: int) -> Optional[Grid]:
    """Decode positive literals of a DIMACS-style model to an N x N grid."""
    chosen: List[List[List[int]]] = [[[] for _ in range(n)] for _ in range(n)]
    for lit in model:
        if lit <= 0 or lit > n ** 3:
            continue
        r, c, v = decode(lit, n)
        chosen[r - 1][c - 1].append(v)

    grid = [[0 for _ in range(n)] for _ in range(n)]
    for r in range(n):
        for c in range(n):
            if len(chosen[r][c]) != 1:
                return None
            grid[r][c] = chosen[r][c][0]
    return grid


def _groups(n: int) -> List[List[tuple]]:
    """All rows, columns and boxes as lists of 0-based (r, c) cells."""
    b = box_size(n)
    groups = [[(r, c) for c in range(n)] for r in range(n)]
    groups += [[(r, c) for r in range(n)] for c in range(n)]
    for br in range(0, n, b):
        for bc in range(0, n, b):
            groups.append([(br + dr, bc + dc) for dr in range(b) for dc in range(b)])
    return groups


def verify_solution(grid: Grid, clues: Grid) -> bool:
    """A filled grid is valid if it respects the clues and every group holds 1..N once."""
    n = len(grid)
    if len(clues) != n:
        return False
    for r in range(n):
        for c in range(n):
            if not (1 <= grid[r][c] <= n):
                return False
            if clues[r][c] != 0 and grid[r][c] != clues[r][c]:
                return False
    digits = set(range(1, n + 1))
    return all({grid[r][c] for (r, c) in cells} == digits for cells in _groups(n))


def clues_have_conflict(clues: Grid) -> bool:
    """True if two clues already repeat a digit in a row, column or box (guaranteed UNSAT)."""
    for cells in _groups(len(clues)):
        seen = set()
        for (r, c) in cells:
            v = clues[r][c]
            if v == 0:
                continue
            if v in seen:
                return True
            seen.add(v)
    return False
