#!/usr/bin/env python3
"""
Summarize runner CSVs per (algorithm, depth) and save grouped bar charts.

    python -m tilepuzzle.experiments.analyze results/*.csv --save results/plots
"""
import argparse, os, sys
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib
# Default to a non-interactive backend; we'll only show() if --show
if "MPLBACKEND" not in os.environ:
    matplotlib.use("Agg")
import matplotlib.pyplot as plt

METRICS = ["generated", "expanded", "time_sec", "cost"]
ORDER = ["DFID", "A*", "IDA*", "DFBnB"]


def load_results(paths):
    dfs = []
    for p in paths:
        df = pd.read_csv(p)
        df["__src__"] = os.path.basename(str(p))
        dfs.append(df)
    if not dfs:
        return pd.DataFrame()
    df = pd.concat(dfs, ignore_index=True, sort=False)
    for c in ("depth", "seed", "generated", "expanded", "cost", "path_len", "time_sec"):
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors="coerce")
    return df


def summarize(df):
    """Mean/std of each metric plus the solved rate, per algorithm and depth."""
    df = df.assign(solved=(df["status"] == "solved").astype(float))
    grouped = df.groupby(["algorithm", "depth"])
    agg = grouped[METRICS].agg(["mean", "std"])
    agg.columns = [f"{m}_{stat}" for m, stat in agg.columns]
    agg["solved_rate"] = grouped["solved"].mean()
    agg["n"] = grouped.size()
    return agg.reset_index().fillna({f"{m}_std": 0.0 for m in METRICS})


def plot_metric(ax, summary, metric):
    depths = sorted(summary["depth"].unique())
    algos = [a for a in ORDER if a in set(summary["algorithm"])]
    x = np.arange(len(depths))
    width = 0.8 / max(1, len(algos))
    for i, algo in enumerate(algos):
        sub = summary[summary["algorithm"] == algo].set_index("depth").reindex(depths)
        ax.bar(x + (i - (len(algos) - 1) / 2) * width,
               sub[f"{metric}_mean"].to_numpy(dtype=float),
               width,
               yerr=sub[f"{metric}_std"].to_numpy(dtype=float),
               capsize=3, label=algo)
    ax.set_xticks(x)
    ax.set_xticklabels([str(d) for d in depths])
    ax.set_xlabel("Scramble depth")
    ax.set_ylabel(metric)
    ax.set_title(f"{metric} vs depth (mean ± std)")
    if metric in ("generated", "expanded"):
        ax.set_yscale("log")
    ax.grid(True, axis="y")
    ax.legend()


def save_fig(fig, outdir: Path, name: str):
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / f"{name}.png"
    fig.savefig(path, dpi=200, bbox_inches="tight")
    print(f"Saved: {path}")
    return path


def main(argv=None):
    ap = argparse.ArgumentParser(description="Summarize and plot runner CSVs.")
    ap.add_argument("csv", nargs="+", help="One or more CSV result files")
    ap.add_argument("--save", default="results/plots", help="Directory to save plots")
    ap.add_argument("--show", action="store_true", help="Also open interactive windows (if GUI available)")
    args = ap.parse_args(argv)

    df = load_results(args.csv)
    if df.empty:
        print("No rows to analyze. Are your CSVs empty?")
        sys.exit(0)

    summary = summarize(df)
    with pd.option_context("display.width", 160, "display.max_columns", 20):
        print(summary.to_string(index=False))

    outdir = Path(args.save)
    base = "combo" if len(args.csv) > 1 else Path(args.csv[0]).stem

    fig, axes = plt.subplots(1, len(METRICS), figsize=(5 * len(METRICS), 5))
    for ax, metric in zip(axes, METRICS):
        plot_metric(ax, summary, metric)
    plt.tight_layout()
    save_fig(fig, outdir, f"{base}_combined")
    summary.to_csv(outdir / f"{base}_summary.csv", index=False)

    if args.show:
        plt.show()
    plt.close(fig)


if __name__ == "__main__":
    main()
