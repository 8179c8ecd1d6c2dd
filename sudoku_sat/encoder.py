"""
Sudoku encoder (Puzzle -> CNF).

Implements: encode_grid(grid) -> (clauses, num_vars) and to_cnf(input_path).

Variable mapping (see codec.py):
    var(r,c,v) = (r-1)*N*N + (c-1)*N + v
where r,c,v are all in range (1...N).

The formula is generated in fixed stages so that its size is predictable:
  (1) Cell: at least one value per cell                    N^2 clauses of length N
  (2) Row: no value twice in a row (pairwise)              N * N * C(N,2) binary clauses
  (3) Column: no value twice in a column (pairwise)        N * N * C(N,2) binary clauses
  (4) Block: no value twice in a sqrt(N) x sqrt(N) block   N * N * C(N,2) binary clauses
  (5) Optional redundant clauses (extended=True): at most one value per cell,
      and every value at least once per row, column and block
  (6) Clues: unit clauses for the given puzzle

For N=9 the default formula has 81 + 3*2916 + K clauses, K being the number
of clues.
"""

from typing import Iterable, List, Tuple
from itertools import combinations

from .codec import encode, num_variables
from .grid import Grid, box_size, read_grid, validate_grid


def at_most_one(vars_list: List[int]) -> List[List[int]]:
  """Pairwise negative clauses: no two of the variables are true together."""
  return [[-a, -b] for a, b in combinations(vars_list, 2)]


def _rows(size: int) -> Iterable[List[Tuple[int, int]]]:
  for row in range(1, size + 1):
    yield [(row, col) for col in range(1, size + 1)]


def _columns(size: int) -> Iterable[List[Tuple[int, int]]]:
  for col in range(1, size + 1):
    yield [(row, col) for row in range(1, size + 1)]


def _blocks(size: int) -> Iterable[List[Tuple[int, int]]]:
  b = box_size(size)
  for block_row in range(b):
    for block_col in range(b):
      yield [(block_row * b + pos // b + 1, block_col * b + pos % b + 1) for pos in range(size)]


def cell_constraints(size: int = 9) -> List[List[int]]:
  """Every cell holds at least one value."""
  clauses: List[List[int]] = []
  for row in range(1, size + 1):
    for col in range(1, size + 1):
      clauses.append([encode(row, col, digit, size) for digit in range(1, size + 1)])
  return clauses


def _exclusion(groups, size: int) -> List[List[int]]:
  # Digit-major: for each digit, every group in order.
  clauses: List[List[int]] = []
  group_list = list(groups)
  for digit in range(1, size + 1):
    for cells in group_list:
      clauses.extend(at_most_one([encode(r, c, digit, size) for (r, c) in cells]))
  return clauses


def row_constraints(size: int = 9) -> List[List[int]]:
  return _exclusion(_rows(size), size)


def column_constraints(size: int = 9) -> List[List[int]]:
  return _exclusion(_columns(size), size)


def block_constraints(size: int = 9) -> List[List[int]]:
  return _exclusion(_blocks(size), size)


def redundant_constraints(size: int = 9) -> List[List[int]]:
  """Clauses implied by the basic encoding; unit propagation gets much further with them.

  At most one value per cell, then at least one cell per value in each row,
  column and block.
  """
  clauses: List[List[int]] = []
  for row in range(1, size + 1):
    for col in range(1, size + 1):
      clauses.extend(at_most_one([encode(row, col, digit, size) for digit in range(1, size + 1)]))
  for groups in (_rows(size), _columns(size), _blocks(size)):
    for cells in groups:
      for digit in range(1, size + 1):
        clauses.append([encode(r, c, digit, size) for (r, c) in cells])
  return clauses


def given_constraints(grid: Grid) -> List[List[int]]:
  """One unit clause per clue."""
  size = len(grid)
  clauses: List[List[int]] = []
  for row_index, row in enumerate(grid):
    for column_index, value in enumerate(row):
      if value != 0:
        clauses.append([encode(row_index + 1, column_index + 1, value, size)])
  return clauses


def encode_grid(grid: Grid, extended: bool = False) -> Tuple[List[List[int]], int]:
  """
  Encode a puzzle grid and return (clauses, num_vars).

  - clauses: list of lists of ints (each clause), no trailing 0s
  - num_vars: N^3 with N = grid size
  """
  size = validate_grid(grid)

  clauses: List[List[int]] = cell_constraints(size)
  clauses.extend(row_constraints(size))
  clauses.extend(column_constraints(size))
  clauses.extend(block_constraints(size))
  if extended:
    clauses.extend(redundant_constraints(size))
  clauses.extend(given_constraints(grid))

  return clauses, num_variables(size)


def to_cnf(input_path: str, extended: bool = False) -> Tuple[List[List[int]], int]:
  """Read puzzle from input_path and return (clauses, num_vars)."""
  return encode_grid(read_grid(input_path), extended=extended)
