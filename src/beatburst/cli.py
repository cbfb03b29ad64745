"""
CLI entry point for beatburst.

Usage:
    beatburst play <audio_file> [options]
    beatburst analyze <audio_file> [-o events.json] [options]
    python -m beatburst ...
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from beatburst.config import load_config


def _progress_bar(current: int, total: int, width: int = 35):
    """Print analysis progress (callbacks processed) to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "=" * filled + " " * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  callback {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"analysed {current}/{total} callbacks ({pct:.0f}%)", flush=True)


def _add_common(parser: argparse.ArgumentParser):
    parser.add_argument(
        "audio",
        type=Path,
        help="Input audio file (wav, ogg, mp3, flac)",
    )
    parser.add_argument("-c", "--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--bands", type=int, default=None, help="Number of frequency bands (default: 8)")
    parser.add_argument("--cooldown", type=float, default=None, help="Per-band cooldown in ms (default: 80)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beatburst",
        description="Beat-synchronised particle fireworks",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Play a track with live fireworks")
    _add_common(play)
    play.add_argument("--width", type=int, default=None, help="Window width")
    play.add_argument("--height", type=int, default=None, help="Window height")
    play.add_argument("-f", "--fps", type=int, default=None, help="Render frames per second")
    play.add_argument("--seed", type=int, default=None, help="Random seed")

    analyze = sub.add_parser("analyze", help="Detect onsets offline and export them")
    _add_common(analyze)
    analyze.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output JSON path (default: <audio>_onsets.json)",
    )
    analyze.add_argument("--rate", type=float, default=None, help="Analysis callbacks per second (default: 60)")
    analyze.add_argument("--max-duration", type=float, default=None, help="Limit analysis to N seconds")

    return parser


def _resolve_config(args):
    cfg = load_config(args.config)
    if args.bands is not None:
        cfg.detector.num_bands = args.bands
    if args.cooldown is not None:
        cfg.detector.cooldown_ms = args.cooldown

    if args.command == "play":
        if args.width:
            cfg.scene.width = args.width
        if args.height:
            cfg.scene.height = args.height
        if args.fps:
            cfg.scene.fps = args.fps
    elif args.rate is not None:
        cfg.analysis.analysis_rate = args.rate

    return cfg.validate()


def _run_play(args, cfg):
    from beatburst.player import Player

    print(f"Playing {args.audio}  (space: play/pause, esc: quit)")
    Player(args.audio, cfg, seed=args.seed).run()


def _run_analyze(args, cfg):
    from beatburst.pipeline import OnsetPipeline

    output = args.output
    if output is None:
        output = args.audio.with_name(f"{args.audio.stem}_onsets.json")

    print(f"Analyzing audio: {args.audio}")
    t0 = time.time()

    pipeline = OnsetPipeline(cfg)
    result = pipeline.process(
        args.audio,
        output_path=output,
        max_duration=args.max_duration,
        progress_callback=_progress_bar,
    )

    counts = result["document"]["band_counts"]
    print(f"  Duration: {result['duration']:.1f}s")
    print(f"  Frames: {result['n_frames']}")
    print(f"  Onsets: {len(result['events'])}  per band: {counts}")
    print(f"  Analysis took {time.time() - t0:.1f}s")
    print(f"  Output: {result['output_path']}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    try:
        cfg = _resolve_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "play":
            _run_play(args, cfg)
        else:
            _run_analyze(args, cfg)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
