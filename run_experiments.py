#!/usr/bin/env python3
import subprocess, sys
from pathlib import Path

def run(cmd):
    print("Running:", cmd)
    r = subprocess.run(cmd, shell=True)
    if r.returncode != 0:
        sys.exit(r.returncode)

def main():
    Path("results").mkdir(exist_ok=True)
    run("python -m tilepuzzle.experiments.runner --rows 2 --cols 3 --depths 4 8 12 --per_depth 10 --algo all --timeout_sec 5 --out results/r2x3.csv")
    run("python -m tilepuzzle.experiments.runner --rows 3 --cols 3 --depths 4 8 12 --per_depth 10 --algo 'A*' 'IDA*' DFBnB --timeout_sec 5 --out results/p8.csv")
    run("python -m tilepuzzle.experiments.runner --rows 3 --cols 3 --depths 4 8 --per_depth 10 --constrained 0 --free_price 1 --algo all --timeout_sec 5 --out results/p8_unit.csv")
    run("python -m tilepuzzle.experiments.analyze results/r2x3.csv results/p8.csv results/p8_unit.csv --save results/plots")

if __name__ == "__main__":
    main()
