import pathlib

import pytest

from sudoku_sat.grid import EXAMPLE_PUZZLE

PUZZLES = pathlib.Path(__file__).resolve().parent.parent / "puzzles"

# Solution of EXAMPLE_PUZZLE, checked by hand against every row, column,
# block and clue.
EXAMPLE_SOLUTION = [
    [1, 2, 6, 4, 3, 7, 9, 5, 8],
    [8, 9, 5, 6, 2, 1, 4, 7, 3],
    [3, 7, 4, 9, 8, 5, 1, 2, 6],
    [4, 5, 7, 1, 9, 3, 8, 6, 2],
    [9, 8, 3, 2, 4, 6, 5, 1, 7],
    [6, 1, 2, 5, 7, 8, 3, 9, 4],
    [2, 6, 9, 3, 1, 4, 7, 8, 5],
    [5, 4, 8, 7, 6, 9, 2, 3, 1],
    [7, 3, 1, 8, 5, 2, 6, 4, 9],
]

SMALL_SOLUTION = [
    [1, 3, 2, 4],
    [2, 4, 1, 3],
    [3, 1, 4, 2],
    [4, 2, 3, 1],
]


def _easy(solution):
    # Blank the first row and the main diagonal; every blank is then a naked single.
    n = len(solution)
    grid = [row[:] for row in solution]
    for i in range(n):
        grid[0][i] = 0
        grid[i][i] = 0
    return grid


@pytest.fixture
def example_puzzle():
    return [row[:] for row in EXAMPLE_PUZZLE]


@pytest.fixture
def example_solution():
    return [row[:] for row in EXAMPLE_SOLUTION]


@pytest.fixture
def easy_puzzle():
    return _easy(EXAMPLE_SOLUTION)


@pytest.fixture
def small_puzzle():
    # unique: the diagonal is forced by rows, then row 1 by columns
    return _easy(SMALL_SOLUTION)


@pytest.fixture
def small_solution():
    return [row[:] for row in SMALL_SOLUTION]


@pytest.fixture
def unsat_puzzle():
    grid = [[0] * 9 for _ in range(9)]
    grid[0][0] = 5
    grid[0][1] = 5
    return grid


@pytest.fixture
def puzzles_dir():
    return PUZZLES


@pytest.fixture
def puzzle_file(tmp_path):
    def write(grid, name="puzzle.txt"):
        path = tmp_path / name
        path.write_text("\n".join(" ".join(str(v) for v in row) for row in grid) + "\n")
        return str(path)

    return write
