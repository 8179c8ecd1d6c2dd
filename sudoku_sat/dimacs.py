"""
DIMACS CNF interchange.

    c optional comment lines
    p cnf <num_vars> <num_clauses>
    1 -2 3 0
"""
from __future__ import annotations

from typing import Iterable, List, Optional, TextIO, Tuple


def write_dimacs(
    clauses: Iterable[Iterable[int]],
    num_vars: int,
    stream: TextIO,
    comments: Iterable[str] = (),
) -> int:
    """Write clauses to an open text stream; returns the number of clauses written.

    An empty clause is written as a bare "0" line.
    """
    clauses = [list(cl) for cl in clauses]
    for line in clauses:
        if 0 in line:
            raise ValueError(f"Illegal clause {line!r}: literals must be non-zero")
    for c in comments:
        stream.write("c " + c + "\n")
    stream.write(f"p cnf {num_vars} {len(clauses)}\n")
    for line in clauses:
        stream.write(" ".join(map(str, line + [0])) + "\n")
    return len(clauses)


def save_dimacs(clauses: Iterable[Iterable[int]], num_vars: int, path: str, comments: Iterable[str] = ()) -> int:
    with open(path, "w") as f:
        return write_dimacs(clauses, num_vars, f, comments)


def parse_dimacs(lines: Iterable[str]) -> Tuple[List[List[int]], int]:
    """Parse DIMACS text; clauses may span lines and are terminated by 0."""
    clauses: List[List[int]] = []
    declared_vars: Optional[int] = None
    declared_clauses: Optional[int] = None
    current: List[int] = []
    for line in lines:
        line = line.strip()
        if not line or line[0] in ("c", "%"):
            continue
        if line[0] == "p":
            parts = line.split()
            if len(parts) != 4 or parts[1] != "cnf":
                raise ValueError(f"Bad problem line: {line!r}")
            declared_vars, declared_clauses = int(parts[2]), int(parts[3])
            continue
        for token in line.split():
            lit = int(token)
            if lit == 0:
                clauses.append(current)
                current = []
            else:
                current.append(lit)
    if current:
        clauses.append(current)
    if declared_clauses is not None and declared_clauses != len(clauses):
        raise ValueError(f"Header declares {declared_clauses} clauses, found {len(clauses)}")
    max_var = max((abs(l) for cl in clauses for l in cl), default=0)
    num_vars = declared_vars if declared_vars is not None else max_var
    if max_var > num_vars:
        raise ValueError(f"Literal {max_var} exceeds declared variable count {num_vars}")
    return clauses, num_vars


def read_dimacs(path: str) -> Tuple[List[List[int]], int]:
    with open(path, "r") as f:
        return parse_dimacs(f)


def format_model(model: Iterable[int]) -> str:
    """Solver-style value line: 'v 1 -2 3 ... 0'."""
    return "v " + " ".join(str(l) for l in list(model) + [0])
