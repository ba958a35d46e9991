"""
CLI for CPM schedule calculation.

Usage:
    python -m src.cpm <tasks.csv|tasks.json> [options]
    python -m src.cpm --example

Options:
    --example               Use the built-in demonstration milestone
    --strict                Reject unresolved dependency ids instead of ignoring them
    --tolerance X           Slack tolerance for critical tasks (default: 0)
    --near-critical X       Slack threshold for near-critical tasks
    --what-if ID DELTA      Report the impact of changing one task's duration
    --output-dir DIR        Write schedule.csv to DIR
    --json                  Output the schedule as JSON
    --verbose               Debug logging
"""

import argparse
import json
import logging
import sys

from src.utils.logger import configure_logging
from .analysis import analyze_schedule, analyze_task_impact, print_critical_path_report
from .engine import compute_schedule, MissingDependencyPolicy
from .loader import load_tasks, write_schedule_csv, example_milestone
from .network import ScheduleError, TaskNetwork
from schemas.validator import SchemaValidationError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the cpm package."""
    package_logger = configure_logging("src.cpm")
    if verbose:
        package_logger.setLevel(logging.DEBUG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Critical Path Method schedule calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "tasks_file",
        nargs="?",
        help="CSV or JSON file of tasks (id, title, duration, dependencies)",
    )
    parser.add_argument(
        "--example",
        action="store_true",
        help="Use the built-in demonstration milestone",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on dependency ids missing from the task set",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        metavar="X",
        help="Slack tolerance for critical tasks",
    )
    parser.add_argument(
        "--near-critical",
        type=float,
        metavar="X",
        help="Slack threshold for near-critical tasks",
    )
    parser.add_argument(
        "--what-if",
        nargs=2,
        metavar=("TASK_ID", "DELTA"),
        help="Show the impact of changing TASK_ID's duration by DELTA",
    )
    parser.add_argument(
        "--output-dir",
        metavar="DIR",
        help="Write schedule.csv to this directory",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output schedule as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    return parser


def print_impact(impact) -> None:
    """Print a what-if impact summary."""
    print(f"\nWhat-if: {impact.task_id} ({impact.task_title}) "
          f"duration {impact.original_duration:g} -> {impact.new_duration:g}")
    print(f"  Project duration: {impact.original_project_duration:g} -> "
          f"{impact.new_project_duration:g}")
    print(f"  {impact.get_slip_summary()}")
    print(f"  Affected tasks: {', '.join(impact.affected_task_ids) or 'none'}")
    if impact.critical_path_changed:
        print(f"  Critical path changed: {' -> '.join(impact.new_critical_path)}")


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.tasks_file and not args.example:
        parser.error("a tasks file or --example is required")

    what_if = None
    if args.what_if:
        try:
            what_if = (args.what_if[0], float(args.what_if[1]))
        except ValueError:
            parser.error(f"--what-if DELTA must be a number, got {args.what_if[1]!r}")

    setup_logging(args.verbose)

    policy = MissingDependencyPolicy.ERROR if args.strict else None

    try:
        if args.example:
            title, tasks = example_milestone()
        else:
            title = args.tasks_file
            tasks = load_tasks(args.tasks_file)

        result = compute_schedule(tasks, missing_dependencies=policy, float_tolerance=args.tolerance)
        logger.debug(f"Scheduled {len(result.tasks)} tasks, project duration {result.project_duration}")

        impact = None
        if what_if:
            impact = analyze_task_impact(
                tasks, what_if[0], what_if[1],
                missing_dependencies=policy, float_tolerance=args.tolerance,
            )

        if args.output_dir:
            write_schedule_csv(result, args.output_dir)

    except (FileNotFoundError, KeyError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except ScheduleError as e:
        print(f"ERROR: Schedule calculation failed: {e}", file=sys.stderr)
        return 1
    except (SchemaValidationError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        document = result.to_dict()
        if impact is not None:
            document['what_if'] = {
                'task_id': impact.task_id,
                'new_duration': impact.new_duration,
                'new_project_duration': impact.new_project_duration,
                'slip': impact.slip,
                'affected_task_ids': impact.affected_task_ids,
                'new_critical_path': impact.new_critical_path,
            }
        print(json.dumps(document, indent=2))
        return 0

    unresolved = TaskNetwork.from_tasks(tasks).unresolved_dependencies()
    analysis = analyze_schedule(result, args.near_critical, unresolved)
    print_critical_path_report(analysis, title=title)
    if impact is not None:
        print_impact(impact)

    return 0


if __name__ == "__main__":
    sys.exit(main())
