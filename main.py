"""
Main entry point for the fuzzy inference demo.

This script loads a model from config/fis_config.toml, feeds it one input
snapshot per command-line group and prints the defuzzified decision for each:

    python main.py temp=-15,humidity=40
    python main.py temp=22,humidity=80 temp=35,humidity=20 --plot
"""

import argparse
import logging
import os
from typing import Dict

from utils.logger import setup_logging, set_cycle_index
from utils.profiler import CodeProfiler, CycleStats
from fuzzy_engine.config_loader import load_machine
from fuzzy_engine.errors import FuzzyEngineError


def parse_snapshot(token: str) -> Dict[str, float]:
    """
    Parses a comma-separated list of name=value pairs into one snapshot.
    """
    values: Dict[str, float] = {}
    for pair in filter(None, token.split(",")):
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected name=value, got '{pair}'")
        values[name.strip()] = float(value)
    return values


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the fuzzy inference model.")
    parser.add_argument("inputs", nargs="*", help="Snapshots such as temp=-15,humidity=40")
    parser.add_argument(
        "--config",
        default=os.path.join(os.path.dirname(__file__), "config", "fis_config.toml"),
        help="Path to the TOML model file.",
    )
    parser.add_argument("--parallel", action="store_true", help="Aggregate rules on a worker pool.")
    parser.add_argument("--plot", action="store_true", help="Save membership plots to 'plots/'.")
    args = parser.parse_args(argv)

    # Initialize logging
    setup_logging()
    main_log = logging.getLogger("main")
    main_log.info("Application starting...")

    try:
        machine = load_machine(args.config)
    except (FuzzyEngineError, OSError) as e:
        main_log.critical("Could not load model '%s': %s", args.config, e)
        return 1
    if args.parallel:
        machine.parallel = True
    main_log.info("Model '%s' loaded.", args.config)

    try:
        snapshots = [parse_snapshot(token) for token in args.inputs]
    except ValueError as e:
        parser.error(str(e))

    status = 0
    stats = CycleStats()
    for i, values in enumerate(snapshots):
        set_cycle_index(i)
        machine.update(values)
        try:
            with CodeProfiler("Inference cycle", stats=stats, rules=len(machine.rules)) as prof:
                label, crisp = machine.compute()
                prof.record(points=len(machine.last_aggregate))
        except FuzzyEngineError as e:
            main_log.error("Inference failed for %s: %s", values, e)
            status = 1
            continue
        main_log.info("%s -> %s = %.4f", values, label, crisp)
        print(f"{values} -> {label} = {crisp:.4f}")

    if args.plot:
        from utils.plot_membership_shapes import plot_universe

        for universe in machine.universes.values():
            is_output = universe.name == machine.rules.result_universe
            plot_universe(universe, result=machine.last_aggregate if is_output else None, save=True)

    summary = stats.summary()
    main_log.info(
        "%d cycles: mean %.3f ms, p95 %.3f ms, max %.3f ms",
        summary["count"], summary["mean_ms"], summary["p95_ms"], summary["max_ms"])
    main_log.info("Application finished.")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
