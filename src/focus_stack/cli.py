from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .commands import FocusCommands, Report
from .hooks import HostAdapter


def _configure_logging(level: str = "WARNING") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def _positive_int(value: str) -> int:
    number = int(value) if value.lstrip('-').isdigit() else 0
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _ctx(project_dir: Optional[str]) -> FocusCommands:
    return FocusCommands(_resolve_project_dir(project_dir))


def _emit(report: Report) -> int:
    sys.stdout.write(report.text + '\n')
    return 0 if report.ok else 1


def _init(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).init(args.extra))


def _start(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).start(args.title))


def _plan(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).plan(args.titles))


def _sub(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).sub(args.title))


def _done(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).done())


def _pivot(args: argparse.Namespace) -> int:
    commands = _ctx(args.project_dir)
    return _emit(commands.pivot(args.reason, new_task=args.new_task, drop_queue=args.drop_queue))


def _status(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).status())


def _capture(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).capture(args.title, args.detail))


def _backlog(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).backlog_list())


def _promote(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).promote(args.backlog_id, args.title))


def _dismiss(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).dismiss(args.backlog_id))


def _history(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).history(args.limit))


def _rebuild(args: argparse.Namespace) -> int:
    return _emit(_ctx(args.project_dir).rebuild())


def _context(args: argparse.Namespace) -> int:
    report = _ctx(args.project_dir).context(args.kind)
    if report.text:
        sys.stdout.write(report.text + '\n')
    return 0


def _read_hook_payload() -> Optional[dict]:
    try:
        payload = json.load(sys.stdin)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        logger.opt(exception=True).debug("Hook payload is not valid JSON; ignoring")
        return None
    return payload if isinstance(payload, dict) else None


def _hook(args: argparse.Namespace) -> int:
    # Hooks must never block the host's tool call: always exit 0.
    payload = _read_hook_payload()
    if payload is None:
        return 0
    adapter = HostAdapter(_resolve_project_dir(args.project_dir))
    if args.event == 'before-tool':
        outcome = adapter.before_tool(payload)
    else:
        outcome = adapter.after_tool(payload)
    if outcome is not None and outcome.accepted:
        logger.info("Hook {} applied {}", args.event, outcome.operation)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Focus stack: task focus tracking for coding agents')
    parser.add_argument('--project-dir', default=None, help='Target project directory (default: current working directory)')
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Diagnostic log level written to stderr',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    init = subparsers.add_parser('init', help='Scan the project and record its summary')
    init.add_argument('--extra', default=None, help='Extra text appended to the scanned summary')
    init.set_defaults(func=_init)

    start = subparsers.add_parser('start', help='Start a main task')
    start.add_argument('title')
    start.set_defaults(func=_start)

    plan = subparsers.add_parser('plan', help='Start the first title and queue the rest')
    plan.add_argument('titles', nargs='+')
    plan.set_defaults(func=_plan)

    sub = subparsers.add_parser('sub', help='Push a sub-task above the current task')
    sub.add_argument('title')
    sub.set_defaults(func=_sub)

    done = subparsers.add_parser('done', help='Complete the task in focus')
    done.set_defaults(func=_done)

    pivot = subparsers.add_parser('pivot', help='Abandon the task in focus with a reason')
    pivot.add_argument('reason')
    pivot.add_argument('--new-task', default=None, help='Start this task right away')
    pivot.add_argument('--drop-queue', action='store_true', help='Discard every queued task')
    pivot.set_defaults(func=_pivot)

    status = subparsers.add_parser('status', help='Show the task stack and queue')
    status.set_defaults(func=_status)

    capture = subparsers.add_parser('capture', help='Park an idea in the backlog')
    capture.add_argument('title')
    capture.add_argument('--detail', default=None)
    capture.set_defaults(func=_capture)

    backlog = subparsers.add_parser('backlog', help='List pending backlog items')
    backlog.set_defaults(func=_backlog)

    promote = subparsers.add_parser('promote', help='Turn a backlog item into a sub-task')
    promote.add_argument('backlog_id')
    promote.add_argument('--title', default=None, help='Override the backlog title')
    promote.set_defaults(func=_promote)

    dismiss = subparsers.add_parser('dismiss', help='Dismiss a backlog item')
    dismiss.add_argument('backlog_id')
    dismiss.set_defaults(func=_dismiss)

    history = subparsers.add_parser('history', help='Show finished work, the stack, queue and backlog')
    history.add_argument('--limit', default=None, type=_positive_int)
    history.set_defaults(func=_history)

    rebuild = subparsers.add_parser('rebuild', help='Rebuild the focus snapshot from the event log')
    rebuild.set_defaults(func=_rebuild)

    context = subparsers.add_parser('context', help='Print the context block injected into the agent')
    context.add_argument('kind', nargs='?', default='short', choices=['short', 'resume'])
    context.set_defaults(func=_context)

    hook = subparsers.add_parser('hook', help='Handle a host tool hook; payload JSON on stdin')
    hook.add_argument('event', choices=['before-tool', 'after-tool'])
    hook.set_defaults(func=_hook)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    return int(handler(args) or 0)


if __name__ == '__main__':
    raise SystemExit(main())
