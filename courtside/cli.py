from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from courtside.analysis import format_analysis_result
from courtside.config import LOG_LEVELS, AppConfig, load_config
from courtside.factory import build_comparison_service, build_sampler
from courtside.ingestion import FrameExtractionError, MediaLoadError, SeekError
from courtside.processing import EXTRACTORS


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="courtside",
        description="Frame sampling and envelope tools for coaching video review.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (defaults to COURTSIDE_LOG_LEVEL or INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    frames = subparsers.add_parser("frames", help="Capture JPEG frames at the given timestamps.")
    frames.add_argument("video", type=Path)
    frames.add_argument("-t", "--at", dest="timestamps", type=float, nargs="+", required=True, help="Seconds.")
    frames.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Write frame_00000.jpg... here instead of printing base64 JSON.",
    )

    unwrap = subparsers.add_parser("unwrap", help="Extract a payload from a JSON response envelope.")
    unwrap.add_argument("file", type=Path, help="JSON file, or '-' for stdin.")
    unwrap.add_argument("--kind", choices=sorted(EXTRACTORS), required=True)

    compare = subparsers.add_parser("compare", help="Compare a learner video against a coach video.")
    compare.add_argument("coach_video", type=Path)
    compare.add_argument("learner_video", type=Path)
    compare.add_argument("--json", action="store_true", help="Print the raw result instead of the report.")

    return parser


def _run_frames(args: argparse.Namespace, config: AppConfig) -> int:
    sampler = build_sampler(config)
    frames = asyncio.run(sampler.sample(args.video, args.timestamps))

    if args.out_dir is None:
        payload = [
            {"timestamp": frame.requested_at, "position": frame.position, "data": frame.as_base64()}
            for frame in frames
        ]
        print(json.dumps(payload))
        return 0

    args.out_dir.mkdir(parents=True, exist_ok=True)
    for index, frame in enumerate(frames):
        target = args.out_dir / f"frame_{index:05d}.jpg"
        target.write_bytes(frame.data)
        logger.debug("Wrote {} ({}s)", target, frame.position)
    print(f"Wrote {len(frames)} frame(s) to {args.out_dir}")
    return 0


def _run_unwrap(args: argparse.Namespace, config: AppConfig) -> int:
    text = sys.stdin.read() if str(args.file) == "-" else args.file.read_text(encoding="utf-8")
    payload = json.loads(text)
    result = EXTRACTORS[args.kind](payload, max_depth=config.envelope_max_depth)
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


def _run_compare(args: argparse.Namespace, config: AppConfig) -> int:
    service = build_comparison_service(config)
    result = service.compare_sync(args.coach_video, args.learner_video)
    if args.json:
        print(result.model_dump_json(indent=2, by_alias=True))
    else:
        print(format_analysis_result(result))
    return 0


COMMANDS = {
    "frames": _run_frames,
    "unwrap": _run_unwrap,
    "compare": _run_compare,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config()
    _configure_logging(args.log_level or config.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except SeekError as exc:
        print(f"Seek failed at {exc.timestamp}s: {exc}", file=sys.stderr)
    except (MediaLoadError, FrameExtractionError, FileNotFoundError) as exc:
        print(str(exc), file=sys.stderr)
    except (json.JSONDecodeError, ValueError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
    except RuntimeError as exc:
        logger.exception("courtside {} failed", args.command)
        print(str(exc), file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
