"""CLI for readycheck: ``readycheck run`` and ``readycheck thresholds``."""

import argparse
import logging
import sys

from readycheck.checklist import ChecklistState
from readycheck.config import DEFAULT_SAMPLING, DEFAULT_THRESHOLDS, SamplingConfig, ThresholdConfig
from readycheck.types import CheckStatus, LoopPhase

logger = logging.getLogger(__name__)

_MARKS = {
    CheckStatus.CHECKING: "…",
    CheckStatus.PASS: "✓",
    CheckStatus.FAIL: "✗",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readycheck",
        description="Pre-recording readiness check from a camera feed",
    )
    sub = parser.add_subparsers(dest="command")

    # readycheck run
    run_p = sub.add_parser("run", help="Run a readiness session on a camera")
    run_p.add_argument(
        "--input", "-i",
        default="0",
        help="Camera index (int) or video path/URL (default: 0)",
    )
    run_p.add_argument(
        "--period", type=float, default=DEFAULT_SAMPLING.period_sec,
        help=f"Seconds between evaluation cycles (default: {DEFAULT_SAMPLING.period_sec})",
    )
    run_p.add_argument(
        "--settle", type=float, default=DEFAULT_SAMPLING.settle_delay_sec,
        help=f"Settle delay after camera ready (default: {DEFAULT_SAMPLING.settle_delay_sec})",
    )
    run_p.add_argument(
        "--streak", type=int, default=DEFAULT_SAMPLING.required_streak,
        help=f"Consecutive passing cycles required (default: {DEFAULT_SAMPLING.required_streak})",
    )
    run_p.add_argument(
        "--max-seconds", type=float, default=60.0,
        help="Give up after this many seconds (default: 60)",
    )
    _add_threshold_args(run_p)
    run_p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    # readycheck thresholds
    thr_p = sub.add_parser("thresholds", help="Print effective thresholds")
    _add_threshold_args(thr_p)

    return parser


def _add_threshold_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--center-tolerance", type=float, default=None)
    parser.add_argument("--yaw-limit", type=float, default=None)
    parser.add_argument("--roll-limit", type=float, default=None)
    parser.add_argument("--eye-open", type=float, default=None)
    parser.add_argument("--expression", type=float, default=None)
    parser.add_argument("--min-face", type=float, default=None)
    parser.add_argument("--max-face", type=float, default=None)


def _thresholds_from_args(args: argparse.Namespace) -> ThresholdConfig:
    return DEFAULT_THRESHOLDS.replace(
        center_tolerance=args.center_tolerance,
        head_yaw_limit=args.yaw_limit,
        head_roll_limit=args.roll_limit,
        eye_open_threshold=args.eye_open,
        expression_threshold=args.expression,
        min_face_size=args.min_face,
        max_face_size=args.max_face,
    )


def _resolve_input(input_str: str):
    """Resolve --input to a camera index or a path."""
    try:
        return int(input_str)
    except ValueError:
        return input_str


def render_checklist(state: ChecklistState, phase: LoopPhase) -> str:
    """Text rendering of the checklist, one line per criterion."""
    lines = [f"[{phase.status_text}] {state.passed_count}/{len(state)} passed"]
    for item in state:
        lines.append(f"  {_MARKS[item.status]} {item.label:<16s} {item.detail}")
    if phase is LoopPhase.SAMPLING and state.streak > 0:
        lines.append(f"  Hold... {state.streak}/{state.required_streak}")
    return "\n".join(lines)


def _print_update(state: ChecklistState, phase: LoopPhase) -> None:
    print(render_checklist(state, phase), flush=True)


def _cmd_thresholds(args: argparse.Namespace) -> None:
    for name, value in _thresholds_from_args(args).to_dict().items():
        print(f"  {name:22s} {value}")


def _cmd_run(args: argparse.Namespace) -> int:
    from readycheck.backends.opencv import HaarFaceBackend, OpenCVCamera
    from readycheck.loop import SamplingLoop

    sampling = SamplingConfig(
        settle_delay_sec=args.settle,
        period_sec=args.period,
        required_streak=args.streak,
    )
    camera = OpenCVCamera(_resolve_input(args.input))
    loop = SamplingLoop(
        camera,
        HaarFaceBackend(),
        thresholds=_thresholds_from_args(args),
        sampling=sampling,
        on_update=_print_update,
    )

    try:
        loop.start()
        if not camera.open():
            print(f"Error: cannot open camera {args.input!r}", file=sys.stderr)
            return 1
        loop.camera_ready()
        ready = loop.wait_ready(timeout=args.max_seconds)
    except KeyboardInterrupt:
        print("\nStopped.")
        return 1
    finally:
        loop.close()
        camera.close()

    if not ready:
        print(f"Not ready after {args.max_seconds:.0f}s", file=sys.stderr)
        return 1
    return 0


def main():
    """Entry point for ``readycheck`` CLI."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    try:
        if args.command == "thresholds":
            _cmd_thresholds(args)
        elif args.command == "run":
            sys.exit(_cmd_run(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
