#!/usr/bin/env python3
"""Performance benchmarking suite for the dependency search.

This script runs the lattice search on synthetic tables with planted
approximate dependencies, in plain, chunked and sampled mode, to help users
choose run options for their table sizes.
"""

import argparse
import logging
import time
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from afdclean import AfdCleanError, discover_dependencies

MODES = ["plain", "chunked", "sampled"]


def generate_planted_data(
    n_rows: int, n_cols: int, noise: float = 0.01, seed: int = 0
) -> Tuple[pd.DataFrame, List[str]]:
    """Generate a table in which every odd column depends on the one before it.

    Parameters
    ----------
    n_rows : int
        Number of rows
    n_cols : int
        Number of columns
    noise : float
        Fraction of rows whose dependent values are overwritten at random
    seed : int
        Random seed

    Returns
    -------
    Tuple[pd.DataFrame, List[str]]
        Synthetic dataset and the planted dependencies as ``lhs->rhs`` keys
    """
    rng = np.random.default_rng(seed)
    data = {}
    planted = []
    for i in range(n_cols):
        name = f"col_{i}"
        if i % 2 == 1:
            source = data[f"col_{i - 1}"]
            values = (source * 7 + 3) % 50
            noisy = rng.random(n_rows) < noise
            values = np.where(noisy, rng.integers(0, 50, n_rows), values)
            planted.append(f"col_{i - 1}->{name}")
        else:
            values = rng.integers(0, 10 + 5 * i, n_rows)
        data[name] = values
    return pd.DataFrame(data), planted


def benchmark_mode(
    df: pd.DataFrame,
    planted: List[str],
    mode: str,
    epsilon: float,
    chunk_size: int,
) -> Dict[str, Any]:
    """Run the search once in ``mode``.

    Parameters
    ----------
    df : pd.DataFrame
        Test dataset
    planted : List[str]
        Dependencies known to hold approximately
    mode : str
        One of ``plain``, ``chunked`` or ``sampled``
    epsilon : float
        Tolerated violation ratio
    chunk_size : int
        Rows per chunk in chunked mode

    Returns
    -------
    Dict[str, Any]
        Benchmark results
    """
    start_time = time.perf_counter()
    try:
        result = discover_dependencies(
            df,
            epsilon=epsilon,
            sampled=mode == "sampled",
            chunk_size=chunk_size if mode == "chunked" else None,
        )
    except AfdCleanError as e:
        return {
            "mode": mode,
            "success": False,
            "error": str(e),
            "runtime": time.perf_counter() - start_time,
        }
    runtime = time.perf_counter() - start_time

    found = {dep.key for dep in result.dependencies}
    return {
        "mode": mode,
        "success": True,
        "error": None,
        "runtime": runtime,
        "analysed_rows": result.total_rows,
        "dependencies": len(result.dependencies),
        "planted_found": sum(1 for key in planted if key in found),
        "planted": len(planted),
        "performed_checks": result.stats.performed_checks,
        "possible_checks": result.stats.possible_checks,
        "partitions_computed": result.stats.partitions_computed,
    }


def run_benchmark_suite(
    n_rows_list: List[int],
    n_cols_list: List[int],
    modes: List[str],
    epsilon: float = 0.05,
    noise: float = 0.01,
    chunk_size: int = 1000,
    n_trials: int = 3,
) -> List[Dict[str, Any]]:
    """Run every mode on every table shape.

    Returns
    -------
    List[Dict[str, Any]]
        Detailed benchmark results
    """
    results = []
    total_configs = len(n_rows_list) * len(n_cols_list)
    config_num = 0

    print(
        f"Running benchmark suite: {total_configs} configurations x "
        f"{len(modes)} modes x {n_trials} trials"
    )
    print(f"epsilon={epsilon}, noise={noise}, chunk size={chunk_size}")
    print()

    for n_rows in n_rows_list:
        for n_cols in n_cols_list:
            config_num += 1
            print(f"[{config_num}/{total_configs}] {n_rows} rows x {n_cols} cols")
            for trial in range(n_trials):
                df, planted = generate_planted_data(n_rows, n_cols, noise, seed=trial)
                for mode in modes:
                    print(f"  {mode}...", end=" ")
                    result = benchmark_mode(df, planted, mode, epsilon, chunk_size)
                    result.update(
                        {
                            "n_rows": n_rows,
                            "n_cols": n_cols,
                            "trial": trial,
                            "config_id": f"{n_rows}x{n_cols}",
                        }
                    )
                    results.append(result)

                    if result["success"]:
                        print(
                            f"{result['runtime']:.3f}s "
                            f"({result['planted_found']}/{result['planted']} planted, "
                            f"{result['dependencies']} found)"
                        )
                    else:
                        print(f"failed: {result['error']}")
            print()

    return results


def analyze_results(results: List[Dict[str, Any]]) -> None:
    """Print summary tables of the benchmark results."""
    df = pd.DataFrame(results)

    print("=" * 60)
    print("BENCHMARK RESULTS SUMMARY")
    print("=" * 60)
    print()

    successful = df[df["success"]].copy()
    if len(successful) > 0:
        print("RUNTIME BY MODE AND TABLE SIZE (seconds):")
        print(
            successful.pivot_table(
                index="config_id", columns="mode", values="runtime", aggfunc="mean"
            ).round(3)
        )
        print()

        print("RECALL OF PLANTED DEPENDENCIES:")
        recall = successful.groupby("mode")[["planted_found", "planted"]].sum()
        recall["recall"] = (recall["planted_found"] / recall["planted"] * 100).round(1)
        print(recall)
        print()

        print("PRUNING (performed / possible checks):")
        pruning = successful.groupby("mode")[["performed_checks", "possible_checks"]].mean()
        print(pruning.round(1))
        print()

    errors = df[~df["success"]]
    if len(errors) > 0:
        print("ERRORS:")
        print(errors.groupby(["mode", "error"]).size())
        print()


def main():
    """Main benchmark runner with command line interface."""
    parser = argparse.ArgumentParser(description="Benchmark the afdclean lattice search")
    parser.add_argument("--rows", nargs="+", type=int, default=[1000, 10000, 50000],
                        help="List of row counts to test")
    parser.add_argument("--cols", nargs="+", type=int, default=[4, 6, 8],
                        help="List of column counts to test")
    parser.add_argument("--modes", nargs="+", default=MODES, choices=MODES,
                        help="Run modes to benchmark")
    parser.add_argument("--epsilon", type=float, default=0.05,
                        help="Tolerated violation ratio")
    parser.add_argument("--noise", type=float, default=0.01,
                        help="Fraction of corrupted rows per planted dependency")
    parser.add_argument("--chunk-size", type=int, default=1000,
                        help="Rows per chunk in chunked mode")
    parser.add_argument("--trials", type=int, default=3,
                        help="Number of trials per configuration")
    parser.add_argument("--save", type=str, help="Save detailed results to CSV file")
    parser.add_argument("--quick", action="store_true",
                        help="Run quick benchmark (fewer configurations)")

    args = parser.parse_args()
    logging.getLogger("afdclean").setLevel(logging.WARNING)

    if args.quick:
        results = run_benchmark_suite(
            n_rows_list=[500, 2000],
            n_cols_list=[4],
            modes=args.modes,
            epsilon=args.epsilon,
            noise=args.noise,
            chunk_size=200,
            n_trials=1,
        )
    else:
        results = run_benchmark_suite(
            n_rows_list=args.rows,
            n_cols_list=args.cols,
            modes=args.modes,
            epsilon=args.epsilon,
            noise=args.noise,
            chunk_size=args.chunk_size,
            n_trials=args.trials,
        )

    analyze_results(results)

    if args.save:
        pd.DataFrame(results).to_csv(args.save, index=False)
        print(f"\nDetailed results saved to {args.save}")


if __name__ == "__main__":
    main()
