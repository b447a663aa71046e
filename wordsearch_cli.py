"""Command line entrypoint: word list in, printable wordsearch image out."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import svg_renderer as svg
import wordsearch_engine as eng


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordsearch",
        description="Make a wordsearch puzzle image from a list of words",
    )
    parser.add_argument(
        "-f", "--file",
        type=Path,
        default=Path("words.txt"),
        help="File containing the list of words, one per line (# comments and blank lines ignored)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output image file (.png, .svg or .pdf). Defaults to <wordlist>.png",
    )
    parser.add_argument("-s", "--size", type=int, help="Grid size in letters (default: computed from the words)")
    parser.add_argument("-x", "--image-width", type=int, default=768, help="Width of the produced image")
    parser.add_argument("-y", "--image-height", type=int, default=1024, help="Height of the produced image")
    parser.add_argument("--solution", type=Path, help="Also write the answer key to this file")
    parser.add_argument("--seed", type=str, default=None, help="Random seed for reproducibility")
    parser.add_argument("--alphabet", type=str, default=eng.PuzzleConfig.alphabet, help="Filler letters")
    parser.add_argument(
        "--max-dimension",
        type=int,
        default=eng.PuzzleConfig.max_grid_dimension,
        help="Largest grid size; longer words are rejected",
    )
    parser.add_argument(
        "--density",
        type=float,
        default=eng.PuzzleConfig.fill_density_target,
        help="Target share of cells covered by words when sizing the grid",
    )
    parser.add_argument(
        "--attempts",
        type=int,
        default=eng.PuzzleConfig.max_placement_attempts_per_word,
        help="Placement attempts per word before giving up on a grid size",
    )
    parser.add_argument(
        "--resize-retries",
        type=int,
        default=eng.PuzzleConfig.max_resize_retries,
        help="How many times to grow the grid after a failed placement",
    )
    parser.add_argument(
        "--directions",
        nargs="+",
        choices=list(eng.ALL_DIRECTIONS),
        default=list(eng.ALL_DIRECTIONS),
        metavar="DIR",
        help="Allowed directions (N NE E SE S SW W NW)",
    )
    parser.add_argument("--print", dest="print_grid", action="store_true", help="Print the grid to stdout")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress progress messages")
    return parser


def config_from_args(args: argparse.Namespace) -> eng.PuzzleConfig:
    return eng.PuzzleConfig(
        alphabet=args.alphabet.upper(),
        max_grid_dimension=args.max_dimension,
        fill_density_target=args.density,
        max_placement_attempts_per_word=args.attempts,
        directions=list(args.directions),
        max_resize_retries=args.resize_retries,
        seed=args.seed,
    )


def default_output(wordlist: Path) -> Path:
    return wordlist.with_suffix(".png")


def _stderr_logger(text: str) -> None:
    print(text, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = (lambda _text: None) if args.quiet else _stderr_logger
    eng.set_logger(logger)
    svg.set_logger(logger)
    try:
        words = eng.load_wordlist(str(args.file))
        result = eng.generate_puzzle(words, config_from_args(args), size=args.size)

        look = svg.Appearance(page_width=args.image_width, page_height=args.image_height)
        output = args.output or default_output(args.file)
        svg.export_image(svg.render_puzzle_svg(result, look), str(output))
        if args.solution:
            svg.export_image(svg.render_solution_svg(result, look), str(args.solution))
    except (eng.WordsearchError, OSError, ValueError) as e:
        print(f"wordsearch: error: {e}", file=sys.stderr)
        return 1
    finally:
        eng.set_logger(None)
        svg.set_logger(None)

    if args.print_grid:
        print(eng.render_preview_ascii(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
