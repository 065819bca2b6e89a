"""
Command-line interface for reelfix.

Usage:
  reelfix clip.mp4 -d 8                          # Fix duration, print report
  reelfix clip.mp4 -d 8 --fps 30 --constant      # With recorder telemetry
  reelfix clip.webm -d 12.5 -O out/              # Write artifact to out/
  reelfix clip.mp4 -d 8 -o report.json           # Save JSON report
  reelfix clip.mp4 -d 8 -q                       # One-line summary
  reelfix --status                               # Show tool availability
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys

from reelfix._version import __version__
from reelfix.config import load_config
from reelfix.delegates import get_fixer_status
from reelfix.errors import PipelineError
from reelfix.formatters import format_default, format_json, format_quiet
from reelfix.models import RawRecording
from reelfix.pipeline import ProcessingPipeline, ProgressEvent
from reelfix.utils import check_all_dependencies


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reelfix",
        description="Repair duration metadata of recorded clips and score them for social platforms.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Telemetry (defaults: 30fps target, actual = target, variable framerate):
  --target-fps   Framerate the recorder asked for
  --fps          Framerate the recorder measured
  --constant     Recorder reported a constant framerate
  --total-frames Number of frames recorded

Output:
  -O/--output-dir  Directory for the corrected clip (default: config or cwd)
  -o/--output      Save JSON report to file
  -q/--quiet       One-line summary
  --json           Print JSON report

Examples:
  reelfix clip.mp4 -d 8 --fps 30 --constant
  reelfix clip.webm -d 12.5 -O out/
  reelfix clip.mp4 -d 8 --max-quality -o report.json
        """,
    )
    parser.add_argument("file", nargs="?", help="Recorded MP4 or WebM file")
    parser.add_argument("-d", "--duration", type=float, help="Measured duration in seconds")
    parser.add_argument("--mime", help="MIME type (guessed from the extension by default)")
    parser.add_argument("--target-fps", type=float, help="Requested framerate")
    parser.add_argument("--fps", type=float, help="Measured framerate")
    parser.add_argument("--constant", action="store_true", help="Framerate was constant")
    parser.add_argument("--total-frames", type=int, help="Number of recorded frames")
    parser.add_argument("--android", action="store_true", help="Clip was recorded on Android")
    parser.add_argument("--max-quality", action="store_true", help="Use the max quality filename prefix")
    parser.add_argument("-O", "--output-dir", help="Directory for the corrected clip")
    parser.add_argument("-o", "--output", help="Save report to JSON file")
    parser.add_argument("-c", "--config", help="Path to a YAML config file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Show log messages")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("-q", "--quiet", action="store_true", help="Quick summary only")
    mode_group.add_argument("--json", action="store_true", help="Print JSON report")
    mode_group.add_argument("--status", action="store_true", help="Show tool availability status")
    return parser


def _print_status(ffmpeg_path: str) -> int:
    print("reelfix status:")
    print("=" * 50)

    print("\nWebM duration fixers:")
    print("-" * 50)
    for name, available in sorted(get_fixer_status(ffmpeg_path).items()):
        icon = "✓" if available else "✗"
        print(f"  {icon} {name}")

    deps = check_all_dependencies(ffmpeg_path)
    print("\nOptional packages:")
    print("-" * 50)
    for name, available in sorted(deps["python"].items()):
        icon = "✓" if available else "✗"
        print(f"  {icon} {name}")

    print("-" * 50)
    print("\nMP4 clips are patched in place and need no external tools.")
    if not deps["system"]["ffmpeg"]:
        print("To fix WebM durations: install ffmpeg (brew install ffmpeg)")
    if not deps["python"]["pyyaml"]:
        print("For config file support: pip install reelfix[config]")
    return 0


def _fallback_copy(path: str, output_dir: str) -> str | None:
    """Copy the unmodified recording to the output directory."""
    os.makedirs(output_dir, exist_ok=True)
    target = os.path.join(output_dir, os.path.basename(path))
    if os.path.abspath(target) == os.path.abspath(path):
        return path
    try:
        shutil.copyfile(path, target)
    except OSError as e:
        print(f"Error: could not copy original file: {e}", file=sys.stderr)
        return None
    return target


def main(argv: list[str] | None = None) -> int:
    """Main entry point for reelfix CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1
    if args.max_quality:
        config.output.max_quality = True

    if args.status:
        return _print_status(config.webm.ffmpeg_path)

    if not args.file:
        parser.error("the following arguments are required: file")
    if args.duration is None:
        parser.error("the following arguments are required: -d/--duration")

    try:
        recording = RawRecording.from_file(
            args.file,
            duration=args.duration,
            mime_type=args.mime,
            target_frame_rate=args.target_fps,
            actual_frame_rate=args.fps,
            is_constant_framerate=args.constant,
            total_frames=args.total_frames,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: invalid input: {e}", file=sys.stderr)
        return 1

    output_dir = args.output_dir or config.output.output_dir or os.getcwd()

    def show_progress(event: ProgressEvent) -> None:
        if not args.quiet and not args.json:
            print(f"[{event.percent:3d}%] {event.message}")

    pipeline = ProcessingPipeline(config=config, progress=show_progress)
    try:
        artifact = pipeline.run(recording, is_android=args.android)
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        copied = _fallback_copy(args.file, output_dir)
        if copied:
            print(f"Automatic optimization did not complete. Original file: {copied}", file=sys.stderr)
        return 1

    path = artifact.save(output_dir)

    if args.quiet:
        print(format_quiet(artifact))
    elif args.json:
        print(format_json(artifact))
    else:
        print()
        print(format_default(artifact))
        print()
        print(f"Saved: {path}")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(format_json(artifact))
        if not args.quiet and not args.json:
            print(f"Report saved to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
