"""
Command-line interface for the headless tutorial trace.

Usage:
    nervechip-trace [--config tutorial.yaml] [--dwell 8] [--csv out/trace.csv] [--plot out/trace.png]
"""

import argparse
import sys
from pathlib import Path

from .config import default_config, load_config
from .logger import Logger, MemoryLogStrategy
from .trace import TutorialTraceRunner, records_to_dataframe, plot_trace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the nerve-on-chip tutorial headless and record drug transport"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (defaults built in)"
    )
    parser.add_argument(
        "--dwell", "-d",
        type=float,
        default=8.0,
        help="Simulated seconds spent in each stage (default: 8)"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0 / 60.0,
        help="Frame length in seconds (default: 1/60)"
    )
    parser.add_argument(
        "--csv",
        type=Path,
        default=None,
        help="Write the per-frame trace to this CSV file"
    )
    parser.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Write a PNG figure of the trace to this path"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output except errors"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Echo INFO log messages collected during the run"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    memory_log = None
    if args.verbose:
        memory_log = MemoryLogStrategy()
        Logger.set_log_storage_strategy(memory_log)

    try:
        config = load_config(args.config) if args.config else default_config()
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        runner = TutorialTraceRunner(config, dwell_s=args.dwell, dt=args.dt)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print("Running nerve-on-chip tutorial trace...")
        print(f"  Stages: {runner.stages.stage_count}")
        print(f"  Dwell per stage: {args.dwell:.2f} s at dt = {args.dt:.4f} s")
        print(f"  Flow rate: {config.flow.flow_rate:.2f} uL/min")

    result = runner.run()
    df = records_to_dataframe(result.records)

    paths = {}
    if args.csv:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.csv, index=False)
        paths["CSV"] = args.csv
    if args.plot:
        paths["Plot"] = plot_trace(df, args.plot)

    if memory_log is not None:
        for message in memory_log.messages(Logger.LogPriority.INFO.name):
            print(f"[INFO] {message}")

    if not args.quiet:
        final = result.final
        print()
        print("=" * 50)
        print("TRACE COMPLETE")
        print("=" * 50)
        print(f"  Frames: {len(result.records)}")
        if final is not None:
            print(f"  Simulated time: {final.time:.2f} s")
            print(f"  Final drug front: {final.drug_front_position:.3f}")
            print(f"  Peak gel diffusion: {result.peak_diffusion_level:.3f}")
            print(f"  Peak neuron exposure: {result.peak_neuron_exposure:.3f}")
            print(f"  Final exposure (neuron / axon / Schwann): "
                  f"{final.neuron_exposure:.3f} / {final.axon_exposure:.3f} / "
                  f"{final.schwann_exposure:.3f}")
        if paths:
            print()
            print("Output files:")
            for label, path in paths.items():
                print(f"  {label}: {path}")

    sys.exit(0)


if __name__ == "__main__":
    main()
