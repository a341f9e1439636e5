"""Command line entry point: ``python -m color_sampler``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from .color.convert import HSV, RGB, parse_hex, rgb_to_hsv, to_hex
from .core.config import SamplerConfig, load_config_file
from .core.logging_utils import LOG_LEVELS, configure_logging, get_module_logger
from .errors import InvalidFormat
from .pointer import PointerPhase, PointerSample, Rect
from .workflow.controller import CaptureWorkflow

logger = get_module_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2


def positive_int(value: str) -> int:
    """Ensure CLI integer parameters are strictly positive."""

    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Value must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="color-sampler",
        description="Convert colors and sample pixels from images",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging verbosity (default: from config, else info)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to write logs",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional key = value configuration file",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    convert = commands.add_parser("convert", help="Show a hex color as RGB, HSV and hex")
    convert.add_argument("color", help="Hex color, RRGGBB or #RRGGBB")

    sample = commands.add_parser("sample", help="Read one pixel from an image file")
    sample.add_argument("image", type=Path, help="Image file to sample")
    sample.add_argument(
        "--point",
        nargs=2,
        type=float,
        required=True,
        metavar=("X", "Y"),
        help="Pointer position in display coordinates",
    )
    sample.add_argument(
        "--display",
        nargs=2,
        type=positive_int,
        default=None,
        metavar=("W", "H"),
        help="Size the image is displayed at (default: native size)",
    )
    sample.add_argument(
        "--white",
        nargs=2,
        type=float,
        default=None,
        metavar=("X", "Y"),
        help="Display position of a white reference to balance against",
    )
    return parser


def format_color(rgb: RGB, hsv: Optional[HSV] = None) -> str:
    hsv = hsv or rgb_to_hsv(rgb)
    return "\n".join(
        [
            f"HEX  #{to_hex(rgb)}",
            f"RGB  {rgb.r}, {rgb.g}, {rgb.b}",
            f"HSV  {round(hsv.h)}°, {round(hsv.s)}%, {round(hsv.v)}%",
        ]
    )


def _pick(workflow: CaptureWorkflow, x: float, y: float, rect: Rect) -> bool:
    if workflow.handle_pointer(PointerSample(x, y, PointerPhase.DOWN), rect) is None:
        return False
    workflow.handle_pointer(PointerSample(x, y, PointerPhase.UP), rect)
    return True


async def run_sample(args: argparse.Namespace, config: SamplerConfig, out: TextIO) -> int:
    async with CaptureWorkflow(config=config) as workflow:
        try:
            surface = await workflow.load_image(args.image)
        except (OSError, ValueError) as e:
            logger.error("Cannot read image %s: %s", args.image, e)
            print(f"error: cannot read image {args.image}: {e}", file=sys.stderr)
            return EXIT_FAILURE

        width, height = args.display or surface.size
        rect = Rect(0.0, 0.0, float(width), float(height))

        if args.white is not None:
            workflow.begin_calibration()
            if not _pick(workflow, args.white[0], args.white[1], rect):
                print(f"error: white point {tuple(args.white)} is outside the image", file=sys.stderr)
                return EXIT_BAD_INPUT

        workflow.begin_sampling()
        if not _pick(workflow, args.point[0], args.point[1], rect):
            print(f"error: point {tuple(args.point)} is outside the image", file=sys.stderr)
            return EXIT_BAD_INPUT

        hex_color = workflow.commit()
        reference = workflow.calibrator.reference
    if hex_color is None:
        return EXIT_FAILURE

    if reference is not None:
        print(f"White reference #{to_hex(reference)}", file=out)
    print(format_color(parse_hex(hex_color)), file=out)
    return EXIT_OK


def run_convert(args: argparse.Namespace, out: TextIO) -> int:
    try:
        rgb = parse_hex(args.color)
    except InvalidFormat as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    print(format_color(rgb), file=out)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None, *, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = {"logging.level": args.log_level, "logging.file": args.log_file}
    config = load_config_file(args.config, overrides)
    try:
        configure_logging(config.logging.level, config.logging.file)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "convert":
        return run_convert(args, out)
    return asyncio.run(run_sample(args, config, out))


__all__ = ["build_parser", "format_color", "main"]
