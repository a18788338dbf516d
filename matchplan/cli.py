"""
Command-line interface for the match planner.
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import load_config
from .engine import schedule
from .exceptions import SchedulingError
from .export import write_csv, write_excel
from .ingest import create_participants_from_config, load_participants, validate_participants


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Match Planner - round-robin tournament scheduling"
    )

    parser.add_argument(
        "--config",
        required=True,
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--participants",
        help="Path to CSV or Excel roster (overrides participants in the config)"
    )

    parser.add_argument(
        "--out",
        help="Path to output file (.xlsx or .csv)"
    )

    parser.add_argument(
        "--legs",
        type=int,
        help="Number of legs (overrides the config)"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration and participants without scheduling"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        # Load configuration
        print("Loading configuration...")
        config = load_config(args.config)
        if args.legs is not None:
            config = config.model_copy(update={'legs': args.legs})

        # Load participants
        if args.participants:
            print("Loading participants from roster...")
            participants = load_participants(args.participants)
        else:
            participants = create_participants_from_config(config)
        print(f"Loaded {len(participants)} participants")

        issues = validate_participants(participants)
        for warning in issues['warnings']:
            print(f"WARNING: {warning}")
        if issues['errors']:
            print("ERRORS found in participants:")
            for error in issues['errors']:
                print(f"  - {error}")
            sys.exit(1)

        if args.validate_only:
            print("Validation complete. Exiting.")
            return

        # Run scheduling
        print("Running scheduling...")
        result = schedule(participants, config)

        # Print summary
        print("\n" + "="*50)
        print("SCHEDULING COMPLETE")
        print("="*50)

        stats = result.get_summary_stats()
        print(f"Total events scheduled: {stats.get('total_events', 0)}")
        print(f"Total participants: {stats.get('total_participants', 0)}")
        print(f"Total rounds: {stats.get('total_rounds', 0)}")
        print(f"Legs: {config.legs} ({config.leg_strategy})")

        if args.out:
            if Path(args.out).suffix.lower() == '.csv':
                write_csv(result, args.out)
            else:
                write_excel(result, args.out, config)
            print(f"\nSchedule exported to: {args.out}")

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except ValidationError as e:
        print(f"ERROR: Invalid configuration: {e}")
        sys.exit(1)
    except SchedulingError as e:
        print(f"ERROR: {e}")
        print()
        print(e.get_diagnostic_report())
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
