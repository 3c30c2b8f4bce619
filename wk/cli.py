"""
Command-line entry point.

One subcommand per invocation:

    wk add writing
    wk start writing
    wk stop
    wk info week
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from wk import __version__
from wk.domain.errors import WkError, TaskNotFound
from wk.domain.models import Period
from wk.infra.config import Settings, get_settings
from wk.infra.db import DatabaseEngine, get_engine
from wk.services import TaskService, TimerService, ReportService
from wk.utils import format_duration

logger = logging.getLogger(__name__)


async def cmd_start(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    try:
        await TimerService(engine).start(args.name)
    except TaskNotFound as e:
        print(e)
    return 0


async def cmd_stop(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    await TimerService(engine).stop()
    return 0


async def cmd_status(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    status = await TimerService(engine).status()
    if not status.is_running:
        print("No task running.")
    else:
        name = status.task.name if status.task else f"task {status.run.task_id}"
        print(f"Running: {name} ({format_duration(status.elapsed_seconds)})")
    return 0


async def cmd_info(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    service = ReportService(engine)
    report = await service.generate_report(Period(args.period))
    print(service.render(report).rstrip("\n"))
    return 0


async def cmd_add(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    try:
        await TaskService(engine).add(args.name)
    except ValidationError as e:
        print(f"wk: error: invalid task name: {e.errors()[0]['msg']}", file=sys.stderr)
        return 2
    return 0


async def cmd_remove(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    await TaskService(engine).remove(args.name)
    return 0


async def cmd_list(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    async for task in TaskService(engine).list():
        print(f"{task.id}: {task.name}")
    return 0


COMMANDS = {
    "start": cmd_start,
    "stop": cmd_stop,
    "status": cmd_status,
    "info": cmd_info,
    "add": cmd_add,
    "remove": cmd_remove,
    "list": cmd_list,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wk", description="Track time spent on named tasks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command")

    start_parser = subparsers.add_parser("start", help="Stop any running task and start NAME")
    start_parser.add_argument("name")

    subparsers.add_parser("stop", help="Stop the running task")
    subparsers.add_parser("status", help="Show the running task")

    info_parser = subparsers.add_parser("info", help="Show time per task for a period")
    info_parser.add_argument(
        "period",
        nargs="?",
        default=Period.DAY.value,
        choices=[p.value for p in Period],
    )

    add_parser = subparsers.add_parser("add", help="Create a task")
    add_parser.add_argument("name")

    remove_parser = subparsers.add_parser("remove", help="Delete a task and its runs")
    remove_parser.add_argument("name")

    subparsers.add_parser("list", help="List all tasks")
    return parser


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    """Open the store, run one subcommand, release the store"""
    engine = get_engine(settings.get_db_url())
    try:
        await engine.create_tables()
        return await COMMANDS[args.command](args, engine)
    finally:
        await engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    try:
        settings = get_settings()
        configure_logging(settings, args.verbose)
        logger.debug(f"Using database {settings.get_db_url()}")
        return asyncio.run(run_command(args, settings))
    except WkError as e:
        print(f"wk: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
