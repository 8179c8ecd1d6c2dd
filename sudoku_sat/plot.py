import argparse
import pathlib
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Plot evaluation metrics.")
    grouping = ap.add_mutually_exclusive_group(required=True)
    grouping.add_argument("--runs", action="store_true")  # one box per run directory
    grouping.add_argument("--heuristics", action="store_true")  # one box per heuristic/encoding, all runs pooled
    ap.add_argument("--metric", default="wall_time_s", help="Column of metrics.csv to plot")
    ap.add_argument("--out", default="plots", help="Directory for the PNG files")
    ap.add_argument("paths", nargs="+", help="Run directories (containing metrics.csv) or CSV files")
    return ap.parse_args(argv)


def get_path(path: pathlib.Path) -> pathlib.Path:
    return path / "metrics.csv" if path.is_dir() else path


def load_runs(paths: List[str]) -> pd.DataFrame:
    frames = []
    for p in paths:
        path = pathlib.Path(p)
        raw = pd.read_csv(get_path(path))
        raw["run"] = path.stem if path.is_file() else path.name
        frames.append(raw)
    return pd.concat(frames, ignore_index=True)


def label_for(row: pd.Series) -> str:
    return f"{row['heuristic']}{' ext' if row['extended'] else ''}"


def group_data(data: pd.DataFrame, by: str, metric: str) -> Dict[int, Dict[str, pd.Series]]:
    """{size: {label: metric values}} for solved (SAT/UNSAT) instances only."""
    done = data[data["status"].isin(["SAT", "UNSAT"])].copy()
    if done.empty:
        return {}
    if by == "heuristics":
        done["label"] = done.apply(label_for, axis=1)
    else:
        done["label"] = done["run"]
    grouped: Dict[int, Dict[str, pd.Series]] = {}
    for (size, label), frame in done.groupby(["size", "label"]):
        grouped.setdefault(int(size), {})[str(label)] = frame[metric]
    return grouped


def plot(series: Dict[str, pd.Series], file: pathlib.Path, title: str, metric: str) -> None:
    if not series:
        return
    labels = sorted(series.keys())
    plt.boxplot([series[l] for l in labels])
    plt.xticks(range(1, len(labels) + 1), labels)
    plt.title(title)
    plt.ylabel(metric)
    plt.tight_layout()
    plt.savefig(file)
    plt.clf()


def plot_all(data: pd.DataFrame, by: str, metric: str, out: pathlib.Path) -> List[pathlib.Path]:
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for size, series in sorted(group_data(data, by, metric).items()):
        file = out / f"N{size}_{by}_{metric}.png"
        plot(series, file, f"N={size}", metric)
        written.append(file)
    return written


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    data = load_runs(args.paths)
    by = "runs" if args.runs else "heuristics"
    for file in plot_all(data, by, args.metric, pathlib.Path(args.out)):
        print(f"Saved plot -> {file}")


if __name__ == "__main__":
    main()
