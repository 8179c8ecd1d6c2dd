#!/usr/bin/env python3
"""
Evaluate the SAT solver on randomly generated Sudoku puzzles.

This script generates puzzles, encodes them to CNF with `encoder.to_cnf`,
runs `solver.solve_cnf`, and collects metrics and plots.

Suites:
 - sat: a solved grid is generated once per N (randomized backtracking, most
   constrained cell first); each instance masks it, so the expected status is SAT.
   With --unsat-proportion, some instances copy one digit onto another cell of
   the same row and keep both cells as clues, so the expected status is UNSAT.
 - random: independent random clues; labeled UNSAT only when two clues clash.

Solver functions are wrapped per instance to count calls (dp, unit checks,
pure literal checks, propagate, variable selection). Labeled runs end with an
accuracy line and an expected-vs-predicted table.

Outputs:
  - CSV with one row per instance (outdir/metrics.csv)
  - Plots (PNG): time_by_size.png, status_counts.png, time_vs_propagations.png
  - Temporary puzzles stored in outdir/tmp

Usage examples:
  sudoku-sat-evaluate --sizes 4 9 --instances-per-size 20 --clue-density 0.5 \
      --suite-mode sat --unsat-proportion 0.2 --timeout 5 --outdir outputs
"""
from __future__ import annotations

import argparse
import csv
import os
import random
import tempfile
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Set

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from . import encoder
from . import solver as solver_mod
from .grid import Grid, box_size, clues_have_conflict, count_clues, model_to_grid, verify_solution, write_grid
from .timeout import Timeout, time_limit

INSTRUMENTED = {
    "dp": "dp_calls",
    "has_unit_clause": "unit_clause_checks",
    "has_pure_literal": "pure_literal_checks",
    "propagate": "propagate_calls",
    "select_variable": "select_variable_calls",
}

STATUSES = ("SAT", "UNSAT", "TIMEOUT", "ERROR")


@dataclass
class InstanceResult:
    size: int
    clue_density: float
    n_clues: int
    num_vars: int
    n_clauses: int
    heuristic: str
    extended: bool
    status: str
    wall_time_s: float
    dp_calls: int
    unit_clause_checks: int
    pure_literal_checks: int
    propagate_calls: int
    select_variable_calls: int
    model_len: int = 0
    model_cnf_valid: Optional[bool] = None
    model_semantic_valid: Optional[bool] = None
    error: str = ""
    expected_status: Optional[str] = None  # 'SAT', 'UNSAT', or None
    is_correct: Optional[bool] = None     # True/False if expected known, else None


# ---------------------------
# Local generator utilities
# ---------------------------
def _candidates(grid: Grid, b: int, r: int, c: int) -> List[int]:
    n = len(grid)
    taken = set(grid[r])
    taken.update(grid[i][c] for i in range(n))
    br, bc = r - r % b, c - c % b
    taken.update(grid[i][j] for i in range(br, br + b) for j in range(bc, bc + b))
    return [v for v in range(1, n + 1) if v not in taken]


def _fill(n: int, rng: random.Random, budget: int) -> Optional[Grid]:
    b = box_size(n)
    grid = [[0] * n for _ in range(n)]
    placements = 0

    def step() -> bool:
        nonlocal placements
        empty = [(r, c) for r in range(n) for c in range(n) if grid[r][c] == 0]
        if not empty:
            return True
        # most constrained cell first
        r, c, options = min(((r, c, _candidates(grid, b, r, c)) for r, c in empty), key=lambda t: len(t[2]))
        rng.shuffle(options)
        for v in options:
            placements += 1
            if placements > budget:
                return False
            grid[r][c] = v
            if step():
                return True
        grid[r][c] = 0
        return False

    return grid if step() else None


def generate_solved_grid(
    n: int,
    rng: Optional[random.Random] = None,
    max_tries: int = 200000,
    restarts: int = 50,
) -> Optional[Grid]:
    """Fill an empty N x N grid by randomized backtracking.

    Each of the `restarts` attempts gets its own RNG drawn from `rng` and gives
    up after `max_tries` placements. Returns None if every attempt gave up.
    """
    if rng is None:
        rng = random.Random()
    box_size(n)
    for _ in range(restarts):
        grid = _fill(n, random.Random(rng.getrandbits(32)), max_tries)
        if grid is not None:
            return grid
    return None


def mask_grid(grid: Grid, density: float, rng: Optional[random.Random] = None) -> Grid:
    """Mask a solved grid according to density -> returns a puzzle with zeros where masked."""
    return mask_grid_with_forced(grid, density, (), rng=rng)


def mask_grid_with_forced(
    grid: Grid, density: float, forced_cells: Iterable[Tuple[int, int]], rng: Optional[random.Random] = None
) -> Grid:
    """Mask a solved grid but always reveal the given forced_cells as clues."""
    if rng is None:
        rng = random.Random()
    forced: Set[Tuple[int, int]] = set(forced_cells)
    n = len(grid)
    out = [[0] * n for _ in range(n)]
    for r in range(n):
        for c in range(n):
            if (r, c) in forced or rng.random() < density:
                out[r][c] = grid[r][c]
    return out


def make_unsat_with_forced_conflict(grid: Grid, rng: Optional[random.Random] = None) -> Tuple[Grid, List[Tuple[int, int]]]:
    """Create an UNSAT-inducing modification and return conflict cells to force as clues.

    We pick a row r and two distinct columns c1, c2 and set new_grid[r][c1] = new_grid[r][c2],
    creating a duplicate in row r.
    """
    if rng is None:
        rng = random.Random()
    n = len(grid)
    new_grid = [row[:] for row in grid]
    r = rng.randrange(n)
    c1, c2 = rng.sample(range(n), 2)
    new_grid[r][c1] = new_grid[r][c2]
    return new_grid, [(r, c1), (r, c2)]


def generate_random_puzzle(n: int, density: float, rng: random.Random) -> Grid:
    """Each cell is a clue with probability `density`; clues are uniform in 1..N."""
    box_size(n)
    return [[rng.randint(1, n) if rng.random() < density else 0 for _c in range(n)] for _r in range(n)]


# ---------------------------
# Checking helpers
# ---------------------------
def verify_cnf_satisfied(clauses: Iterable[Iterable[int]], model: List[int]) -> bool:
    """Check that model satisfies all clauses. Model is a list of assigned literals."""
    assign = set(model)
    return all(any(l in assign for l in cl) for cl in clauses)


# ---------------------------
# Instrumentation wrappers for the solver
# ---------------------------
def _counting(func: Callable, counters: Dict[str, int], key: str) -> Callable:
    def wrapper(*args, **kwargs):
        counters[key] += 1
        return func(*args, **kwargs)

    return wrapper


@contextmanager
def instrument_solver() -> Iterator[Dict[str, int]]:
    """Count calls to the solver functions in INSTRUMENTED while the block runs.

    The solver looks these functions up as module globals, so replacing the
    module attributes is enough; the originals are put back on exit.
    """
    counters = dict.fromkeys(INSTRUMENTED.values(), 0)
    originals = {name: getattr(solver_mod, name) for name in INSTRUMENTED}
    for name, func in originals.items():
        setattr(solver_mod, name, _counting(func, counters, INSTRUMENTED[name]))
    try:
        yield counters
    finally:
        for name, func in originals.items():
            setattr(solver_mod, name, func)


# ---------------------------
# Run / evaluation logic
# ---------------------------
def write_puzzle_tmp(grid: Grid, tmp_dir: str) -> str:
    """Write puzzle to a temporary file and return its path."""
    os.makedirs(tmp_dir, exist_ok=True)
    fd, path = tempfile.mkstemp(prefix="sudoku_", suffix=".txt", dir=tmp_dir, text=True)
    with os.fdopen(fd, "w") as f:
        write_grid(grid, f)
    return path


def run_one_instance(
    grid: Grid,
    timeout_s: Optional[float],
    tmp_dir: str,
    expected_status: Optional[str] = None,
    heuristic: str = "mrv",
    extended: bool = False,
) -> InstanceResult:
    """Encode `grid` through a puzzle file, solve it under a time limit and check the model."""
    n = len(grid)
    n_clues = count_clues(grid)
    fields = dict(
        size=n,
        clue_density=n_clues / (n * n),
        n_clues=n_clues,
        heuristic=heuristic,
        extended=extended,
        expected_status=expected_status,
    )

    try:
        clauses, num_vars = encoder.to_cnf(write_puzzle_tmp(grid, tmp_dir), extended=extended)
    except ValueError as e:
        return InstanceResult(
            num_vars=0,
            n_clauses=0,
            status="ERROR",
            wall_time_s=0.0,
            error=f"encode: {type(e).__name__}: {e}",
            is_correct=None if expected_status is None else False,
            **dict.fromkeys(INSTRUMENTED.values(), 0),
            **fields,
        )

    model: Optional[List[int]] = None
    with instrument_solver() as counters:
        started = time.perf_counter()
        try:
            with time_limit(timeout_s):
                status, model = solver_mod.solve_cnf(clauses, num_vars, heuristic=heuristic)
        except Timeout:
            status = "TIMEOUT"
        wall_time = time.perf_counter() - started

    res = InstanceResult(
        num_vars=num_vars,
        n_clauses=len(clauses),
        status=status,
        wall_time_s=wall_time,
        **counters,
        **fields,
    )
    if status == "SAT" and model is not None:
        res.model_len = len(model)
        res.model_cnf_valid = verify_cnf_satisfied(clauses, model)
        decoded = model_to_grid(model, n)
        res.model_semantic_valid = decoded is not None and verify_solution(decoded, grid)
    if expected_status in ("SAT", "UNSAT"):
        res.is_correct = status == expected_status
    return res


def save_csv(rows: List[InstanceResult], path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(InstanceResult.__dataclass_fields__))
        writer.writeheader()
        for r in rows:
            writer.writerow(asdict(r))


def _save(fig, outdir: str, name: str) -> str:
    path = os.path.join(outdir, name)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path


def _plot_time_by_size(done: List[InstanceResult], outdir: str) -> str:
    sizes = sorted({r.size for r in done})
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.boxplot([[r.wall_time_s for r in done if r.size == n] for n in sizes], showfliers=False)
    ax.set_xticks(range(1, len(sizes) + 1))
    ax.set_xticklabels([str(n) for n in sizes])
    ax.set(title="Solve time by size (finished runs)", xlabel="N", ylabel="Seconds")
    return _save(fig, outdir, "time_by_size.png")


def _plot_status_counts(rows: List[InstanceResult], outdir: str) -> str:
    sizes = sorted({r.size for r in rows})
    width = 0.8 / len(STATUSES)
    fig, ax = plt.subplots(figsize=(7, 4))
    for i, status in enumerate(STATUSES):
        heights = [sum(1 for r in rows if r.size == n and r.status == status) for n in sizes]
        ax.bar([x + i * width for x in range(len(sizes))], heights, width=width, label=status)
    ax.set_xticks([x + 0.4 - width / 2 for x in range(len(sizes))])
    ax.set_xticklabels([str(n) for n in sizes])
    ax.set(title="Status counts by size", xlabel="N", ylabel="Count")
    ax.legend()
    return _save(fig, outdir, "status_counts.png")


def _plot_time_vs_propagations(done: List[InstanceResult], outdir: str) -> str:
    fig, ax = plt.subplots(figsize=(6, 4))
    points = ax.scatter([r.propagate_calls for r in done], [r.wall_time_s for r in done],
                        c=[r.size for r in done], cmap="viridis", alpha=0.7)
    fig.colorbar(points, ax=ax).set_label("N")
    ax.set(title="Time vs propagate calls", xlabel="propagate calls (instrumented)", ylabel="Seconds")
    return _save(fig, outdir, "time_vs_propagations.png")


def make_plots(rows: List[InstanceResult], outdir: str) -> List[str]:
    """Write the summary plots; returns the paths written (none for an empty run)."""
    os.makedirs(outdir, exist_ok=True)
    if not rows:
        return []
    done = [r for r in rows if r.status in ("SAT", "UNSAT")]
    paths = [_plot_status_counts(rows, outdir)]
    if done:
        paths.insert(0, _plot_time_by_size(done, outdir))
        paths.append(_plot_time_vs_propagations(done, outdir))
    return paths


def print_summary(results: List[InstanceResult]) -> None:
    """Accuracy over labeled instances, an expected-vs-predicted table and mean solve times."""
    labeled = [r for r in results if r.expected_status in ("SAT", "UNSAT")]
    if not labeled:
        return
    outcomes = Counter((r.expected_status, r.status) for r in labeled)
    correct = outcomes[("SAT", "SAT")] + outcomes[("UNSAT", "UNSAT")]
    print(f"Labeled accuracy: {correct}/{len(labeled)} = {correct / len(labeled):.3f}")
    for expected in ("SAT", "UNSAT"):
        cells = ", ".join(f"{status}={outcomes[(expected, status)]}" for status in STATUSES)
        print(f"Expected {expected}: predicted {cells}")

    for status in ("SAT", "UNSAT"):
        times = [r.wall_time_s for r in results if r.status == status]
        if times:
            print(f"Mean time (predicted {status}): {sum(times) / len(times):.3f}s over {len(times)} instances")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Evaluate the Sudoku SAT solver on generated instances.")

    suite = ap.add_argument_group("instances")
    suite.add_argument("--sizes", nargs="*", type=int, default=[4, 9], help="Grid sizes N (perfect squares)")
    suite.add_argument("--instances-per-size", type=int, default=10)
    suite.add_argument("--clue-density", type=float, default=0.4, help="Probability that a cell is kept as a clue")
    suite.add_argument("--suite-mode", choices=["random", "sat"], default="sat",
                       help="sat: mask a generated solution; random: independent random clues")
    suite.add_argument("--unsat-proportion", type=float, default=0.0,
                       help="Share of sat-suite instances turned UNSAT by a duplicated clue")
    suite.add_argument("--gen-tries", type=int, default=20000, help="Placement budget per grid generation attempt")
    suite.add_argument("--seed", type=int, default=None)

    solving = ap.add_argument_group("solver")
    solving.add_argument("--heuristic", choices=solver_mod.HEURISTICS, default="mrv")
    solving.add_argument("--extended", action="store_true", help="Add the redundant clauses to every encoding")
    solving.add_argument("--timeout", type=float, default=5.0, help="Seconds per instance (Unix only)")

    output = ap.add_argument_group("output")
    output.add_argument("--outdir", default="outputs", help="Directory for metrics.csv, plots and puzzle files")
    output.add_argument("--no-plots", action="store_true")
    return ap.parse_args(argv)


def _next_instance(n: int, base_solution: Optional[Grid], args: argparse.Namespace,
                   rng: random.Random) -> Tuple[Grid, Optional[str]]:
    """A puzzle plus its known status (None when unknown)."""
    if base_solution is None:
        grid = generate_random_puzzle(n, args.clue_density, rng)
        return grid, ("UNSAT" if clues_have_conflict(grid) else None)
    if rng.random() < args.unsat_proportion:
        conflicted, forced = make_unsat_with_forced_conflict(base_solution, rng=rng)
        return mask_grid_with_forced(conflicted, args.clue_density, forced, rng=rng), "UNSAT"
    return mask_grid(base_solution, args.clue_density, rng=rng), "SAT"


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    rng = random.Random(args.seed)
    tmp_dir = os.path.join(args.outdir, "tmp")
    results: List[InstanceResult] = []

    for n in args.sizes:
        try:
            box_size(n)
        except ValueError:
            print(f"[skip] N={n} is not a perfect square; skipping.")
            continue

        base_solution: Optional[Grid] = None
        if args.suite_mode == "sat":
            started = time.perf_counter()
            base_solution = generate_solved_grid(n, rng, max_tries=args.gen_tries)
            if base_solution is None:
                print(f"N={n}: no solved grid within the placement budget; using random clues instead.")
            else:
                print(f"N={n}: solved grid generated in {time.perf_counter() - started:.3f}s")

        for i in range(1, args.instances_per_size + 1):
            grid, expected = _next_instance(n, base_solution, args, rng)
            res = run_one_instance(grid, args.timeout, tmp_dir, expected_status=expected,
                                   heuristic=args.heuristic, extended=args.extended)
            results.append(res)
            print(f"N={n} [{i}/{args.instances_per_size}] {res.status} in {res.wall_time_s:.3f}s "
                  f"({res.n_clues} clues, {res.n_clauses} clauses)")

    csv_path = os.path.join(args.outdir, "metrics.csv")
    save_csv(results, csv_path)
    print(f"Saved metrics CSV -> {csv_path}")
    if not args.no_plots:
        for p in make_plots(results, args.outdir):
            print(f"Saved plot -> {p}")
    print_summary(results)


if __name__ == "__main__":
    main()
