"""
GUI command-line interface entry point.

Usage:
    nervechip-gui [-c config.yaml]
"""

import argparse
import sys

from .logger import Logger


def main():
    parser = argparse.ArgumentParser(
        description="Nerve-on-Chip Drug Exposure Tutorial",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with the reference device
    nervechip-gui

    # Run with custom config
    nervechip-gui -c examples/default.yaml
"""
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to YAML config file (optional)"
    )

    args = parser.parse_args()

    # Import here to avoid DearPyGui import if just checking help
    from .gui.app import run_gui

    Logger.initialize()
    try:
        run_gui(args.config)
    except KeyboardInterrupt:
        print("\nGUI closed.")
        sys.exit(0)
    except (FileNotFoundError, ValueError) as e:
        Logger.log(f"GUI failed to start: {e}", Logger.LogPriority.ERROR)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
