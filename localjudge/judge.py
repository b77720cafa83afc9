#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""Command line interface: ingest Competitive Companion payloads and run
solutions against the saved test cases."""
from __future__ import annotations

import argparse
import logging
import os
import sys

from . import state
from .config import ConfigError
from .events import EventSink, JsonLinesSink, LoggingSink
from .logger import initialize_logging, with_diagnostics
from .orchestrator import Orchestrator
from .problems import IngestError, ingest, load_problem, parse_payload
from .run import RUNTIMES
from .settings import resolve_settings
from .state import RunRefused

log = logging.getLogger(__name__)


def positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{s} is not an integer')
    if value < 1:
        raise argparse.ArgumentTypeError(f'{s} must be at least 1')
    return value


def argparser_basic_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-l', '--log_level', default='info', help='set log level (debug, info, warning, error, critical)')
    parser.add_argument('-w', '--workspace', default=os.getcwd(), help='workspace root (default: current directory)')
    parser.add_argument(
        '--max_additional_info',
        type=int,
        default=15,
        help='maximum number of lines of additional info (e.g. compiler output or program stderr) to display (set to 0 to disable additional info)',
    )


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run solutions against local test cases.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    ingest_parser = subparsers.add_parser('ingest', help='save a problem from a Competitive Companion JSON payload')
    argparser_basic_arguments(ingest_parser)
    ingest_parser.add_argument('payload', help='JSON file, or - for stdin')

    run_parser = subparsers.add_parser('run', help='run the solution of a task against its test cases')
    argparser_basic_arguments(run_parser)
    run_parser.add_argument('-c', '--case', type=positive_int, help='run only the test case with this 1-based index')
    run_parser.add_argument('-r', '--runtime', choices=list(RUNTIMES), help='override the configured runtime')
    run_parser.add_argument('-t', '--timeout_ms', type=positive_int, help='override the per-case timeout (ms)')
    run_parser.add_argument('--ignore_case', action='store_true', help='compare output case-insensitively')
    run_parser.add_argument(
        '--events',
        choices=['log', 'json'],
        default='log',
        help='report results as log messages, or as one JSON object per line on stdout',
    )
    run_parser.add_argument('taskdir', help='task directory, containing problem.yaml')
    return parser


def do_ingest(args: argparse.Namespace) -> int:
    if args.payload == '-':
        raw = sys.stdin.buffer.read()
    else:
        with open(args.payload, 'rb') as f:
            raw = f.read()
    settings = resolve_settings(args.workspace)
    problem = ingest(parse_payload(raw), args.workspace, settings)
    state.current.set(problem)
    print(f'Saved {problem}: {len(problem.cases)} test case(s) in {problem.task_dir}')
    return 0


def do_run(args: argparse.Namespace) -> int:
    overrides = {'runtime': args.runtime, 'timeout_ms': args.timeout_ms}
    if args.ignore_case:
        overrides['compare'] = {'case_sensitive': False}
    settings = resolve_settings(args.workspace, overrides)
    state.current.set(load_problem(args.taskdir, settings.tests_dir_name))

    sink: EventSink
    if args.events == 'json':
        sink = JsonLinesSink(sys.stdout)
    else:
        sink = LoggingSink(max_additional_info=args.max_additional_info)

    orchestrator = Orchestrator(sink, settings_resolver=lambda root: settings)
    root = os.path.realpath(args.workspace)
    try:
        if args.case is not None:
            summary = orchestrator.run_one(root, args.case)
        else:
            summary = orchestrator.run_all(root)
    except RunRefused:
        return 1
    if summary is None:
        return 1
    if args.events == 'log':
        print(f'{state.current.get()} tested: {summary}')
    return 0 if summary.all_accepted else 1


def main() -> None:
    args = argparser().parse_args()
    initialize_logging(args.log_level)

    status = 1
    try:
        if args.command == 'ingest':
            status = do_ingest(args)
        else:
            status = do_run(args)
    except (ConfigError, IngestError) as err:
        message, _, details = str(err).partition('\n')
        log.error(with_diagnostics(message, details, args.max_additional_info))
    except KeyboardInterrupt:
        print('\naborting...')
    sys.exit(status)


if __name__ == '__main__':
    main()
