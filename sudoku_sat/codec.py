"""
Variable mapping between (row, col, digit) facts and CNF variables.

    var(row, col, digit) = (row-1)*N*N + (col-1)*N + digit

with row, col, digit all in 1..N. For the standard 9x9 grid the variables
span 1..729.
"""

from typing import Tuple

DEFAULT_SIZE = 9


def _check_range(name: str, value: int, size: int) -> None:
  if not (1 <= value <= size):
    raise ValueError(f"{name} must be in 1..{size}, got {value}")


def num_variables(size: int = DEFAULT_SIZE) -> int:
  return size ** 3


def encode(row: int, col: int, digit: int, size: int = DEFAULT_SIZE) -> int:
  """Map a 1-based (row, col, digit) triple to its variable."""
  _check_range("row", row, size)
  _check_range("col", col, size)
  _check_range("digit", digit, size)
  return (row - 1) * size * size + (col - 1) * size + digit


def decode(variable: int, size: int = DEFAULT_SIZE) -> Tuple[int, int, int]:
  """Inverse of encode(): variable -> (row, col, digit), all 1-based."""
  if not (1 <= variable <= num_variables(size)):
    raise ValueError(f"Variable {variable} outside 1..{num_variables(size)}")
  index = variable - 1
  digit = index % size + 1
  index //= size
  col = index % size + 1
  row = index // size + 1
  return row, col, digit
