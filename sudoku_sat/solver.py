"""
DPLL SAT solver for the Sudoku CNF (Puzzle -> SAT/UNSAT).

Implements: solve_cnf(clauses, num_vars) -> (status, model_or_None)

Notes:
- propagate() is the single place where an assignment is pushed through the
  formula. It is pure: it returns a new clause list or None on contradiction.
- The search (dp) is iterative (non-recursive): each stack frame keeps the
  formula and assignment snapshot of the parent plus the literal of the
  branch still to try. Branches never share a mutable assignment.
- Branching tries True before False on the selected variable.
"""


from typing import Dict, Iterable, List, Optional, Tuple

from .encoder import encode_grid
from .grid import Grid, assignment_to_grid

Formula = List[List[int]]
Assignment = Dict[int, bool]

HEURISTICS = ("first", "mrv", "jw")


def remove_tautologies(clauses: Iterable[Iterable[int]]) -> Tuple[List[List[int]], List[int]]:
  """Remove clauses that are tautologies (contain x and -x).

  Returns the filtered clauses and a list of variables that appeared in tautologies (for info only).
  """
  new_clauses: List[List[int]] = []
  removed: List[int] = []
  for clause in clauses:
    c = list(clause)
    s = set(c)
    if any((-lit) in s for lit in s):
      removed.extend(abs(l) for l in s)
    else:
      new_clauses.append(c)
  return new_clauses, removed


def remove_duplicate_literals(clauses: Iterable[List[int]]) -> List[List[int]]:
  normalized: List[List[int]] = []
  for c in clauses:
    if len(set(c)) != len(c):
      # dict.fromkeys keeps the first occurrence order
      normalized.append(list(dict.fromkeys(c)))
    else:
      normalized.append(c)
  return normalized


def has_empty_clause(clauses: Iterable[Iterable[int]]) -> bool:
  return any(len(c) == 0 for c in clauses)


def has_unit_clause(clauses: Iterable[List[int]]) -> Tuple[bool, int]:
  """Return (True, lit) if there exists a unit clause [lit], else (False, 0)."""
  for clause in clauses:
    if len(clause) == 1:
      return True, clause[0]
  return False, 0


def has_pure_literal(clauses: Iterable[List[int]], assignment: Assignment) -> Tuple[bool, int]:
  """Return (True, lit) if an unassigned literal occurs with one polarity only, else (False, 0)."""
  literals = set(l for clause in clauses for l in clause)
  for literal in sorted(literals, key=abs):
    if -literal not in literals and abs(literal) not in assignment:
      return True, literal
  return False, 0


def propagate(clauses: Iterable[List[int]], literal: int) -> Optional[Formula]:
  """Make `literal` true and simplify.

  Satisfied clauses are dropped, the negation is removed from the others.
  Returns None as soon as a clause would become empty (contradiction).
  """
  negated = -literal
  new_clauses: Formula = []
  for clause in clauses:
    if literal in clause:
      continue
    if negated in clause:
      if len(clause) == 1:
        return None
      new_clauses.append([l for l in clause if l != negated])
    else:
      # clauses are never mutated, so untouched ones are shared by reference
      new_clauses.append(clause)
  return new_clauses


def _first_unassigned(clauses: Iterable[List[int]], assignment: Assignment) -> Optional[int]:
  for clause in clauses:
    for lit in clause:
      if abs(lit) not in assignment:
        return abs(lit)
  return None


def _shortest_positive(clauses: Iterable[List[int]], assignment: Assignment) -> Optional[int]:
  # Smallest clause that still has an unassigned positive literal; for the
  # Sudoku encoding that is the cell (or group) with the fewest candidates.
  best: Optional[List[int]] = None
  for clause in clauses:
    if best is not None and len(clause) >= len(best):
      continue
    if any(l > 0 and l not in assignment for l in clause):
      best = clause
      if len(best) == 2:
        break
  if best is None:
    return _first_unassigned(clauses, assignment)
  return next(l for l in best if l > 0 and l not in assignment)


def _jeroslow_wang(clauses: Iterable[List[int]], assignment: Assignment) -> Optional[int]:
  """JW score(l) = sum over clauses c containing l of 2^(-|c|); ties keep the first seen."""
  scores: Dict[int, float] = {}
  for c in clauses:
    weight = 2.0 ** (-len(c))
    for lit in c:
      if abs(lit) not in assignment:
        scores[lit] = scores.get(lit, 0.0) + weight
  if not scores:
    return None
  best_lit = max(scores.items(), key=lambda kv: kv[1])[0]
  return abs(best_lit)


def select_variable(clauses: Iterable[List[int]], assignment: Assignment, heuristic: str = "first") -> Optional[int]:
  """Pick an unassigned variable occurring in the formula, or None if there is none.

  - first: first unassigned variable in clause scan order
  - mrv: first positive literal of the shortest clause holding one
  - jw: variable of the best Jeroslow-Wang literal
  """
  if heuristic == "first":
    return _first_unassigned(clauses, assignment)
  if heuristic == "mrv":
    return _shortest_positive(clauses, assignment)
  if heuristic == "jw":
    return _jeroslow_wang(clauses, assignment)
  raise ValueError(f"Unknown heuristic {heuristic!r}; expected one of {', '.join(HEURISTICS)}")


def _assign(assignment: Assignment, literal: int) -> Assignment:
  extended = dict(assignment)
  extended[abs(literal)] = literal > 0
  return extended


def _branch(clauses: Formula, assignment: Assignment, literal: int) -> Optional[Tuple[Formula, Assignment]]:
  narrowed = propagate(clauses, literal)
  if narrowed is None:
    return None
  return narrowed, _assign(assignment, literal)


def _unit_propagate(clauses: Formula, assignment: Assignment) -> Optional[Formula]:
  """Unit propagation to a fixed point; records forced values in `assignment` (caller-owned)."""
  while True:
    found, lit = has_unit_clause(clauses)
    if not found:
      return clauses
    variable, value = abs(lit), lit > 0
    if assignment.get(variable, value) != value:
      return None
    assignment[variable] = value
    clauses = propagate(clauses, lit)
    if clauses is None:
      return None


def _simplify(clauses: Formula, assignment: Assignment, pure_literals: bool) -> Tuple[str, Optional[Formula], Optional[Assignment]]:
  """Push simplifications to a local fixpoint.

  Returns ("SAT", None, assignment), ("UNSAT", None, None) or ("CONTINUE", clauses, assignment).
  """
  if not clauses:
    return ("SAT", None, assignment)
  if has_empty_clause(clauses):
    return ("UNSAT", None, None)

  assignment_loc = dict(assignment)
  clauses_loc: Optional[Formula] = clauses
  while True:
    clauses_loc = _unit_propagate(clauses_loc, assignment_loc)
    if clauses_loc is None:
      return ("UNSAT", None, None)
    if not clauses_loc:
      return ("SAT", None, assignment_loc)
    if not pure_literals:
      break
    found_pure, plit = has_pure_literal(clauses_loc, assignment_loc)
    if not found_pure:
      break
    # a pure literal never empties a clause
    clauses_loc = propagate(clauses_loc, plit)
    assignment_loc[abs(plit)] = plit > 0

  return ("CONTINUE", clauses_loc, assignment_loc)


def dp(
  clauses: Iterable[Iterable[int]],
  assignment: Optional[Assignment] = None,
  heuristic: str = "first",
  pure_literals: bool = False,
) -> Optional[Assignment]:
  """Iterative (non-recursive) DPLL.

  Returns a satisfying (possibly partial) assignment, or None if unsatisfiable.
  The caller's assignment is applied to the formula first (a clause it
  falsifies makes the result None) and is never modified.
  """
  if heuristic not in HEURISTICS:
    raise ValueError(f"Unknown heuristic {heuristic!r}; expected one of {', '.join(HEURISTICS)}")

  formula: Optional[Formula] = [list(c) for c in clauses]
  seeded = dict(assignment or {})
  # a starting assignment is pushed through the formula like any decision
  for variable, value in seeded.items():
    formula = propagate(formula, variable if value else -variable)
    if formula is None:
      return None

  state: Optional[Tuple[Formula, Assignment]] = (formula, seeded)

  # Each stack frame stores a deferred branch to try upon backtracking:
  # (clauses_snapshot, assignment_snapshot, alt_literal)
  stack: List[Tuple[Formula, Assignment, int]] = []

  while True:
    if state is not None:
      status, clauses_loc, assignment_loc = _simplify(state[0], state[1], pure_literals)
      if status == "SAT":
        return assignment_loc
      if status == "CONTINUE":
        variable = select_variable(clauses_loc, assignment_loc, heuristic)
        if variable is None:
          # every literal left is already assigned
          return assignment_loc
        stack.append((clauses_loc, assignment_loc, -variable))
        state = _branch(clauses_loc, assignment_loc, variable)
        continue

    # Backtrack
    if not stack:
      return None
    clauses_loc, assignment_loc, alt_lit = stack.pop()
    state = _branch(clauses_loc, assignment_loc, alt_lit)


def solve(
  clauses: Iterable[Iterable[int]],
  num_vars: Optional[int] = None,
  assignment: Optional[Assignment] = None,
  heuristic: str = "first",
  pure_literals: bool = False,
) -> Optional[Assignment]:
  """Solve a formula; None means unsatisfiable.

  With num_vars, the result is total over 1..num_vars: variables the search
  never had to decide are set to False.
  """
  result = dp(clauses, assignment, heuristic=heuristic, pure_literals=pure_literals)
  if result is None:
    return None
  if num_vars:
    for variable in range(1, num_vars + 1):
      result.setdefault(variable, False)
  return result


def solve_cnf(clauses: Iterable[Iterable[int]], num_vars: int, **options) -> Tuple[str, Optional[List[int]]]:
  """Solve a DIMACS-style formula over variables 1..num_vars.

  Tautologies and repeated literals are removed first. Returns ("SAT", model)
  with one signed literal per variable in ascending order, or ("UNSAT", None).
  """
  clauses_no_tauts, _tauts = remove_tautologies(clauses)
  normalized = remove_duplicate_literals(clauses_no_tauts)

  result = solve(normalized, num_vars, **options)
  if result is None:
    return ("UNSAT", None)
  model = [v if result[v] else -v for v in sorted(result)]
  return ("SAT", model)


def solve_grid(grid: Grid, extended: bool = False, **options) -> Optional[Grid]:
  """Encode, solve and decode a puzzle; None if it has no solution."""
  clauses, num_vars = encode_grid(grid, extended=extended)
  result = solve(clauses, num_vars, **options)
  if result is None:
    return None
  return assignment_to_grid(result, len(grid))
