"""cronhook CLI"""

import argparse
import asyncio
import os
import sys

from cronhook import __version__
from cronhook.config import JOBS_ENV, load_settings
from cronhook.exception import ConfigError
from cronhook.runner import configure_logging, run
from scheduler.parser import parse_jobs


def run_command(args: argparse.Namespace) -> int:
    """스케줄러 실행"""
    try:
        settings = load_settings(args.config)
        configure_logging(settings)
        asyncio.run(run(settings))
    except ConfigError as e:
        print(e.message, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    return 0


def check_command(args: argparse.Namespace) -> int:
    """Job 스펙 검증 (다음 실행 시점 및 버려진 엔트리 출력)"""
    spec = args.jobs if args.jobs is not None else os.environ.get(JOBS_ENV, "")
    if not spec.strip():
        print(f"Error: no job spec given (use --jobs or set {JOBS_ENV})", file=sys.stderr)
        return 1

    result = parse_jobs(spec)

    for index, job in enumerate(result.jobs, start=1):
        print(f"[{index}] {job.label}  ({job.schedule.expression})")
        if job.headers:
            print(f"    headers: {', '.join(name for name, _ in job.headers)}")
        if job.body is not None:
            print(f"    body: {len(job.body)} chars")

        occurrence = job.next_fire
        for _ in range(args.count):
            if occurrence is None:
                print("    (no further occurrences)")
                break
            print(f"    {occurrence.isoformat()}")
            occurrence = job.schedule.next_after(occurrence)

    for dropped in result.dropped:
        print(f"Dropped: {dropped.entry!r} - {dropped.reason}")

    print()
    print(f"{len(result.jobs)} valid, {len(result.dropped)} dropped")

    if not result.jobs:
        print(f"Error: No valid jobs parsed from {JOBS_ENV}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cronhook",
        description="cronhook - 크론 스케줄 기반 HTTP 호출 스케줄러"
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.set_defaults(handler=run_command, config=None)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run the scheduler (default)")
    run_parser.add_argument(
        "-c", "--config",
        default=None,
        help="YAML config file (default: $CRONHOOK_CONFIG)"
    )
    run_parser.set_defaults(handler=run_command)

    # check command
    check_parser = subparsers.add_parser("check", help="Validate a job spec and preview occurrences")
    check_parser.add_argument(
        "-j", "--jobs",
        default=None,
        help=f"Job spec (default: ${JOBS_ENV})"
    )
    check_parser.add_argument(
        "-n", "--count",
        type=int,
        default=3,
        help="Number of upcoming occurrences to show (default: 3)"
    )
    check_parser.set_defaults(handler=check_command)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.handler(args))


if __name__ == "__main__":
    main()
