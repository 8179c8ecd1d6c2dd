"""Sudoku solving by CNF encoding and a DPLL SAT solver."""

from .codec import decode, encode
from .encoder import encode_grid, to_cnf
from .solver import dp, propagate, solve, solve_cnf, solve_grid

__all__ = ["decode", "encode", "encode_grid", "to_cnf", "dp", "propagate", "solve", "solve_cnf", "solve_grid"]
