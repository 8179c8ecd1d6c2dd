import copy

import pytest

from sudoku_sat.encoder import encode_grid
from sudoku_sat.grid import assignment_to_grid, verify_solution
from sudoku_sat.solver import (
    dp,
    has_pure_literal,
    has_unit_clause,
    propagate,
    remove_duplicate_literals,
    remove_tautologies,
    select_variable,
    solve,
    solve_cnf,
    solve_grid,
)


# --- propagate ---------------------------------------------------------------

def test_propagate_drops_satisfied_clause():
    assert propagate([[1, 2], [3, 4]], 1) == [[3, 4]]


def test_propagate_shortens_clause_with_negation():
    assert propagate([[-1, 2], [3]], 1) == [[2], [3]]
    assert propagate([[1, 2], [-2, 3]], -1) == [[2], [-2, 3]]


def test_propagate_contradiction():
    assert propagate([[2, 3], [-1]], 1) is None


def test_propagate_is_pure():
    clauses = [[1, 2], [-1, 3], [4]]
    before = copy.deepcopy(clauses)
    result = propagate(clauses, 1)
    assert clauses == before
    assert result == [[3], [4]]
    # untouched clauses are shared, rewritten ones are new lists
    assert result[1] is clauses[2]
    assert result[0] is not clauses[1]


def test_propagate_empty_formula():
    assert propagate([], 5) == []


# --- helpers -----------------------------------------------------------------

def test_has_unit_clause():
    assert has_unit_clause([[1, 2], [-3], [4]]) == (True, -3)
    assert has_unit_clause([[1, 2]]) == (False, 0)


def test_has_pure_literal():
    assert has_pure_literal([[1, 2], [-2, 3]], {}) == (True, 1)
    assert has_pure_literal([[1, 2], [-2, 3]], {1: False}) == (True, 3)
    assert has_pure_literal([[1, -1]], {}) == (False, 0)


def test_preprocessing():
    clauses, removed = remove_tautologies([[1, -1, 2], [3, 4]])
    assert clauses == [[3, 4]]
    assert sorted(removed) == [1, 1, 2]
    assert remove_duplicate_literals([[1, 2, 1], [3]]) == [[1, 2], [3]]


def test_select_variable_policies():
    clauses = [[-5, -6], [3, 4, 7], [1, 2]]
    assert select_variable(clauses, {}) == 5
    assert select_variable(clauses, {5: False, 6: False}) == 3
    assert select_variable(clauses, {}, "mrv") == 1
    assert select_variable([[1, 2], [-3]], {1: True, 2: False, 3: True}) is None
    # -5 and -6 share the highest JW weight; the first one seen wins
    assert select_variable(clauses, {}, "jw") == 5
    with pytest.raises(ValueError):
        select_variable(clauses, {}, "vsids")


# --- dp / solve --------------------------------------------------------------

def test_empty_formula_is_satisfied():
    assert dp([]) == {}


def test_empty_clause_is_unsatisfiable():
    assert dp([[1], []]) is None


def test_true_branch_is_tried_first():
    assert dp([[1, 2]]) == {1: True}
    assert solve([[1, 2]], num_vars=3) == {1: True, 2: False, 3: False}


def test_unit_propagation_chain():
    assert dp([[1, 2], [-1]]) == {1: False, 2: True}


def test_backtracking_to_false_branch():
    result = dp([[-1, 2], [-1, -2], [1, 3]])
    assert result == {1: False, 3: True}


def test_unsatisfiable_formula():
    assert dp([[1, 2], [-1, 2], [1, -2], [-1, -2]]) is None
    assert solve_cnf([[1, 2], [-1, 2], [1, -2], [-1, -2]], 2) == ("UNSAT", None)


def test_caller_assignment_is_not_modified():
    start = {1: False}
    result = dp([[1, 2]], start)
    assert start == {1: False}
    assert result == {1: False, 2: True}


def test_unit_conflicting_with_given_assignment():
    assert dp([[1]], {1: False}) is None


def test_starting_assignment_that_falsifies_a_clause():
    assert dp([[1, 2]], {1: False, 2: False}) is None
    assert solve([[1, 2]], 2, assignment={1: False, 2: False}) is None
    assert dp([[1, 2], [-1, 3]], {1: True, 3: False}) is None


def test_starting_assignment_simplifies_the_formula():
    assert dp([[1, 2], [3]], {1: True}) == {1: True, 3: True}
    assert dp([[-1, 2]], {1: True}) == {1: True, 2: True}
    assert dp([[1]], {5: True}) == {5: True, 1: True}


def test_pure_literal_elimination():
    assert dp([[1, 2], [1, 3]], pure_literals=True) == {1: True}


def test_unknown_heuristic():
    with pytest.raises(ValueError):
        dp([[1]], heuristic="nope")


def test_solve_cnf_returns_full_model():
    status, model = solve_cnf([[1, -1], [2, 3], [-2]], 4)
    assert status == "SAT"
    assert model == [-1, -2, 3, -4]


# --- Sudoku ------------------------------------------------------------------

def test_easy_puzzle_with_default_policy(easy_puzzle, example_solution):
    assert solve_grid(easy_puzzle) == example_solution


@pytest.mark.parametrize("heuristic", ["first", "mrv", "jw"])
@pytest.mark.parametrize("extended", [False, True])
def test_policies_agree_on_unique_solution(easy_puzzle, example_solution, heuristic, extended):
    assert solve_grid(easy_puzzle, extended=extended, heuristic=heuristic) == example_solution


def test_example_puzzle(example_puzzle, example_solution):
    solution = solve_grid(example_puzzle, extended=True, heuristic="mrv")
    assert solution is not None
    assert solution[0][:3] == [1, 2, 6]
    assert verify_solution(solution, example_puzzle)
    assert solution == example_solution


def test_total_assignment_decodes(easy_puzzle, example_solution):
    clauses, num_vars = encode_grid(easy_puzzle)
    assignment = solve(clauses, num_vars)
    assert sorted(assignment) == list(range(1, num_vars + 1))
    assert sum(assignment.values()) == 81
    assert assignment_to_grid(assignment, 9) == example_solution


def test_model_satisfies_every_clause(small_puzzle):
    clauses, num_vars = encode_grid(small_puzzle)
    status, model = solve_cnf(clauses, num_vars)
    assert status == "SAT"
    true_literals = set(model)
    assert all(any(l in true_literals for l in clause) for clause in clauses)


def test_small_and_empty_grids(small_puzzle, small_solution):
    assert solve_grid(small_puzzle) == small_solution
    assert solve_grid(small_puzzle, heuristic="jw", extended=True) == small_solution
    empty = [[0] * 4 for _ in range(4)]
    assert verify_solution(solve_grid(empty), empty)


def test_duplicate_in_row_is_unsatisfiable(unsat_puzzle):
    assert solve_grid(unsat_puzzle) is None
    clauses, num_vars = encode_grid(unsat_puzzle)
    assert solve(clauses, num_vars) is None


def test_solving_twice_gives_same_result(easy_puzzle):
    clauses, num_vars = encode_grid(easy_puzzle)
    before = copy.deepcopy(clauses)
    start = {}
    first = solve(clauses, num_vars, assignment=start)
    second = solve(clauses, num_vars, assignment=start)
    assert first == second
    assert clauses == before
    assert start == {}
