#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Command Line Interface
=================================================
Copyright (c) 2025 PNGN-Tec LLC

Usage
=====
    tellraw render "§lHello§r, §cworld" --output hello.png --scale 2
    tellraw render '{"rawtext":[{"text":"Hi "},{"selector":"@p"}]}' \\
        --mode tellraw --selector @p=Steve
    tellraw pad table.txt
    tellraw width "§lBold§r text"
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from tellraw_config import ALGORITHM_MAP, ScalingAlgorithm, get_config
from tellraw_pad import pad_with_format
from tellraw_rawtext import Scores, Selectors, parse_tellraw
from tellraw_render import create_renderer
from tellraw_width import get_line_width

logger = logging.getLogger('tellraw_cli')

EXIT_INPUT_ERROR = 2


def _parse_selectors(items: List[str]) -> Selectors:
    selectors: Selectors = {}
    for item in items:
        key, sep, value = item.partition('=')
        if not sep:
            raise ValueError(f"Selector substitution must be SELECTOR=TEXT: {item!r}")
        selectors[key] = value
    return selectors


def _parse_scores(items: List[str]) -> Scores:
    scores: Scores = {}
    for item in items:
        target, sep, value = item.partition('=')
        objective, colon, name = target.partition(':')
        if not sep or not colon:
            raise ValueError(f"Score substitution must be OBJECTIVE:NAME=VALUE: {item!r}")
        scores.setdefault(objective, {})[name] = int(value)
    return scores


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_render(args: argparse.Namespace) -> int:
    content = args.text
    if not content.strip():
        raise ValueError("Content cannot be empty")

    if args.mode == 'tellraw':
        content = parse_tellraw(content,
                                _parse_selectors(args.selector),
                                _parse_scores(args.score))

    renderer = create_renderer(args.font_dir)
    img = renderer.render(content)
    if img.width == 0:
        raise ValueError("Nothing to render: text has no visible characters")

    if args.scale > 1:
        size = (img.width * args.scale, img.height * args.scale)
        img = img.resize(size, ALGORITHM_MAP[ScalingAlgorithm.NEAREST])

    img.save(args.output, format='PNG')
    logger.debug(f"Render stats: {renderer.get_stats()}")
    print(f"✓ Saved {args.output} ({img.width}x{img.height})")
    return 0


def cmd_pad(args: argparse.Namespace) -> int:
    if args.file is None:
        text = sys.stdin.read()
    else:
        text = Path(args.file).read_text(encoding='utf-8')

    print(pad_with_format(text))
    return 0


def cmd_width(args: argparse.Namespace) -> int:
    for line in args.text.split('\n'):
        print(get_line_width(line))
    return 0


COMMANDS = {
    'render': cmd_render,
    'pad': cmd_pad,
    'width': cmd_width,
}


# ============================================================================
# ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tellraw', description='PNGN Tellraw chat text renderer')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    render_parser = subparsers.add_parser('render', help='render chat text to a PNG image')
    render_parser.add_argument('text')
    render_parser.add_argument('--mode', choices=('text', 'tellraw'), default='text')
    render_parser.add_argument('--font-dir', default=None)
    render_parser.add_argument('--output', '-o', default='tellraw.png')
    render_parser.add_argument('--scale', type=int, default=1)
    render_parser.add_argument('--selector', action='append', default=[], metavar='SELECTOR=TEXT')
    render_parser.add_argument('--score', action='append', default=[], metavar='OBJECTIVE:NAME=VALUE')

    pad_parser = subparsers.add_parser('pad', help='resolve (padN) markers in a template')
    pad_parser.add_argument('file', nargs='?', default=None)

    width_parser = subparsers.add_parser('width', help='print the pixel width of each line')
    width_parser.add_argument('text')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'scale', 1) < 1:
        parser.error('--scale must be at least 1')

    try:
        config = get_config()
        config.validate()
        level = 'DEBUG' if args.verbose or config.debug_mode else config.log_level.upper()
        logging.basicConfig(level=level, format='%(name)s %(levelname)s: %(message)s')

        return COMMANDS[args.command](args)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
