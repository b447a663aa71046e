from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from wordsearch_engine import PuzzleResult


# -----------------------------------------------------------------------------
# Simple logger hook (mirrors wordsearch_engine)
# -----------------------------------------------------------------------------
_LOGGER: Optional[Callable[[str], None]] = None


def set_logger(fn: Optional[Callable[[str], None]]) -> None:
    """Allow the UI to inject a logger callback: fn(text: str). None resets to print."""
    global _LOGGER
    _LOGGER = fn


def _log(msg: str) -> None:
    if _LOGGER:
        _LOGGER(msg)
        return
    print(msg)


@dataclass
class Appearance:
    """
    Visual settings used by the SVG renderer.
    Keep this in sync with the CLI flags and the UI fields.
    """
    # Grid
    cell_bg_color: str = "#FFFFFF"
    cell_line_color: str = "#000000"
    cell_line_thickness: float = 1.0
    show_grid_lines: bool = True

    # Letters
    grid_font_family: str = "Arial"
    grid_font_size: int = 24
    grid_font_bold: bool = False
    grid_font_color: str = "#000000"

    # Legend (the word list under the grid)
    list_font_family: str = "Arial"
    list_font_size: int = 16
    list_font_color: str = "#000000"
    list_bold: bool = False
    legend_columns: int = 3
    show_legend: bool = True
    # Solutions: include legend (True) or grid-only (False)
    solution_show_legend: bool = True

    # --- Solution marking options ---
    solution_mark_style: str = "highlight"     # "highlight" | "circle"
    solution_mark_color: str = "#D94242"
    solution_highlight_opacity: float = 0.35
    solution_circle_width: float = 2.0
    solution_circle_band_frac: float = 0.55    # fraction of cell height
    solution_circle_pad_len: float = 2.0       # extra length at each end (px)

    # Border
    add_border: bool = False
    border_thickness: float = 2.0
    border_color: str = "#000000"
    border_distance: float = 2.0

    # Page: when set, the drawing is scaled to fit this box (aspect kept)
    page_width: Optional[int] = None
    page_height: Optional[int] = None
    page_color: str = "#FFFFFF"


# -----------------------------------------------------------------------------
# Tiny helper to build safe SVG text (no external lib, very basic)
# -----------------------------------------------------------------------------
def _esc(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def legend_positions(width: int, line_height: int, columns: int, count: int) -> List[Tuple[int, int]]:
    """
    (x, y) offsets for ``count`` legend entries split over ``columns``.
    Column-major; when the split is uneven the leftmost columns get one extra.
    """
    columns = max(1, int(columns))
    col_w = width // columns
    out: List[Tuple[int, int]] = []
    for column in range(columns):
        rows = count // columns
        if count % columns > column:
            rows += 1
        for row in range(rows):
            out.append((column * col_w, row * line_height))
    return out


@dataclass
class _Layout:
    cell: int
    pad: int
    grid_w: int
    grid_h: int
    legend_line_h: int
    legend_h: int
    total_w: int
    total_h: int


def _layout(result: PuzzleResult, appearance: Appearance, legend: List[str]) -> _Layout:
    # Size math: cell becomes font_size * 1.6, with some padding
    rows = len(result.letters)
    cols = len(result.letters[0]) if rows else 0
    cell = max(12, int(appearance.grid_font_size * 1.6))
    pad = int(cell * 0.4)
    grid_w = cols * cell
    grid_h = rows * cell

    col_count = max(1, int(appearance.legend_columns))
    legend_line_h = max(12, int(appearance.list_font_size * 1.4))
    legend_rows = (len(legend) + col_count - 1) // col_count
    legend_h = legend_rows * legend_line_h + (pad if legend else 0)

    return _Layout(
        cell=cell,
        pad=pad,
        grid_w=grid_w,
        grid_h=grid_h,
        legend_line_h=legend_line_h,
        legend_h=legend_h,
        total_w=grid_w + pad * 2,
        total_h=grid_h + legend_h + pad * 2,
    )


def _open_svg(lay: _Layout, appearance: Appearance) -> List[str]:
    """<svg> tag; with a page size the content viewBox is fitted into the page."""
    out: List[str] = []
    if appearance.page_width and appearance.page_height:
        out.append(
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{appearance.page_width}" height="{appearance.page_height}" '
            f'viewBox="0 0 {lay.total_w} {lay.total_h}" preserveAspectRatio="xMidYMin meet">'
        )
    else:
        out.append(
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{lay.total_w}" height="{lay.total_h}" '
            f'viewBox="0 0 {lay.total_w} {lay.total_h}">'
        )
    out.append(f'<rect x="0" y="0" width="{lay.total_w}" height="{lay.total_h}" fill="{appearance.page_color}" />')
    return out


def _draw_frame(out: List[str], lay: _Layout, appearance: Appearance) -> None:
    # Optional border (around GRID, offset by border_distance)
    if appearance.add_border:
        d = float(appearance.border_distance or 0.0)
        out.append(
            f'<rect x="{lay.pad - d}" y="{lay.pad - d}" width="{lay.grid_w + 2 * d}" height="{lay.grid_h + 2 * d}" '
            f'stroke="{appearance.border_color}" stroke-width="{appearance.border_thickness}" fill="none" />'
        )

    # Grid background
    out.append(
        f'<rect x="{lay.pad}" y="{lay.pad}" width="{lay.grid_w}" height="{lay.grid_h}" '
        f'fill="{appearance.cell_bg_color}" stroke="none" />'
    )


def _draw_grid_lines(out: List[str], lay: _Layout, rows: int, cols: int, appearance: Appearance) -> None:
    if not appearance.show_grid_lines:
        return
    stroke = appearance.cell_line_color
    sw = appearance.cell_line_thickness
    pad, cell = lay.pad, lay.cell
    for c in range(cols + 1):
        x = pad + c * cell
        out.append(f'<line x1="{x}" y1="{pad}" x2="{x}" y2="{pad + lay.grid_h}" stroke="{stroke}" stroke-width="{sw}" />')
    for r in range(rows + 1):
        y = pad + r * cell
        out.append(f'<line x1="{pad}" y1="{y}" x2="{pad + lay.grid_w}" y2="{y}" stroke="{stroke}" stroke-width="{sw}" />')


def _draw_letters(out: List[str], lay: _Layout, letters: List[List[str]], appearance: Appearance) -> None:
    font_weight = "bold" if appearance.grid_font_bold else "normal"
    out.append(
        f'<g font-family="{_esc(appearance.grid_font_family)}" font-size="{appearance.grid_font_size}" '
        f'font-weight="{font_weight}" fill="{appearance.grid_font_color}">'
    )
    # Center letters in cells
    txt_dy = int(appearance.grid_font_size * 0.35)
    for r, row in enumerate(letters):
        for c, ch in enumerate(row):
            x = lay.pad + c * lay.cell + lay.cell // 2
            y = lay.pad + r * lay.cell + lay.cell // 2 + txt_dy
            out.append(f'<text x="{x}" y="{y}" text-anchor="middle">{_esc(ch)}</text>')
    out.append('</g>')


def _draw_legend(out: List[str], lay: _Layout, legend: List[str], appearance: Appearance) -> None:
    if not legend:
        return
    font_weight = "bold" if appearance.list_bold else "normal"
    out.append(
        f'<g font-family="{_esc(appearance.list_font_family)}" font-size="{appearance.list_font_size}" '
        f'font-weight="{font_weight}" fill="{appearance.list_font_color}">'
    )
    lx = lay.pad + 4
    ly = lay.pad + lay.grid_h + lay.pad + lay.legend_line_h
    spots = legend_positions(lay.grid_w, lay.legend_line_h, appearance.legend_columns, len(legend))
    for (dx, dy), word in zip(spots, legend):
        out.append(f'<text x="{lx + dx}" y="{ly + dy}" text-anchor="start">{_esc(word)}</text>')
    out.append('</g>')


# -----------------------------------------------------------------------------
# Core renderers
# -----------------------------------------------------------------------------
def render_puzzle_svg(result: PuzzleResult, appearance: Optional[Appearance] = None) -> str:
    """
    Draw the grid with letters and the word list under it.
    """
    appearance = appearance or Appearance()
    letters = result.letters
    rows = len(letters)
    cols = len(letters[0]) if rows else 0
    legend = list(result.legend) if appearance.show_legend else []
    lay = _layout(result, appearance, legend)

    out = _open_svg(lay, appearance)
    _draw_frame(out, lay, appearance)
    _draw_grid_lines(out, lay, rows, cols, appearance)
    _draw_letters(out, lay, letters, appearance)
    _draw_legend(out, lay, legend, appearance)
    out.append('</svg>')
    return "\n".join(out)


def _pill(pw_cells: Tuple[Tuple[int, int], ...], lay: _Layout, appearance: Appearance) -> str:
    """Rotated rounded rect covering a word from its first to its last letter."""
    cell, pad = lay.cell, lay.pad
    rect_h = max(1.0, float(appearance.solution_circle_band_frac) * cell)
    rx = rect_h * 0.5  # true half-circle endcaps

    # Centers of first/last letters
    (r0, c0) = pw_cells[0]
    (r1, c1) = pw_cells[-1]
    x0 = pad + c0 * cell + 0.5 * cell
    y0 = pad + r0 * cell + 0.5 * cell
    x1 = pad + c1 * cell + 0.5 * cell
    y1 = pad + r1 * cell + 0.5 * cell

    dx = x1 - x0
    dy = y1 - y0
    dist = math.hypot(dx, dy)
    ux, uy = (dx / dist, dy / dist) if dist > 1e-6 else (1.0, 0.0)

    # 0.5*cell along an axis, ~0.707*cell along a diagonal
    ext_each = 0.5 * cell * (abs(ux) + abs(uy)) + float(appearance.solution_circle_pad_len)
    rect_w = dist + 2.0 * ext_each
    cx = (x0 + x1) * 0.5
    cy = (y0 + y1) * 0.5
    ang = math.degrees(math.atan2(dy, dx)) if dist > 1e-6 else 0.0
    return (
        f'<rect x="{cx - rect_w * 0.5:.2f}" y="{cy - rect_h * 0.5:.2f}" width="{rect_w:.2f}" height="{rect_h:.2f}" '
        f'fill="none" stroke="{appearance.solution_mark_color}" stroke-width="{appearance.solution_circle_width:.2f}" '
        f'rx="{rx:.2f}" ry="{rx:.2f}" transform="rotate({ang:.2f} {cx:.2f} {cy:.2f})" />'
    )


def render_solution_svg(result: PuzzleResult, appearance: Optional[Appearance] = None) -> str:
    """
    Answer key:
      - Draw grid + letters like the puzzle.
      - Mark answers with either:
          * "highlight": per-cell tinted rects behind the letters of placed words
          * "circle": one rotated pill per placed word, diagonals included
    """
    appearance = appearance or Appearance()
    letters = result.letters
    used = result.used_mask
    rows = len(letters)
    cols = len(letters[0]) if rows else 0
    legend = list(result.legend) if appearance.solution_show_legend else []
    lay = _layout(result, appearance, legend)

    out = _open_svg(lay, appearance)
    _draw_frame(out, lay, appearance)

    mark_style = (appearance.solution_mark_style or "highlight").lower()
    if mark_style not in ("highlight", "circle"):
        raise ValueError(f"unknown solution mark style: {appearance.solution_mark_style}")

    # --- Highlights behind letters ---
    if mark_style == "highlight":
        for r in range(rows):
            for c in range(cols):
                if used[r][c]:
                    x = lay.pad + c * lay.cell + 1
                    y = lay.pad + r * lay.cell + 1
                    out.append(
                        f'<rect x="{x}" y="{y}" width="{lay.cell - 2}" height="{lay.cell - 2}" '
                        f'fill="{appearance.solution_mark_color}" '
                        f'fill-opacity="{appearance.solution_highlight_opacity}" stroke="none" />'
                    )

    _draw_grid_lines(out, lay, rows, cols, appearance)

    # --- Pill bands below letters ---
    if mark_style == "circle":
        for pw in result.placed_words:
            out.append(_pill(pw.cells, lay, appearance))

    _draw_letters(out, lay, letters, appearance)
    _draw_legend(out, lay, legend, appearance)
    out.append('</svg>')
    return "\n".join(out)


# -----------------------------------------------------------------------------
# Output
# -----------------------------------------------------------------------------
def save_svg(svg_text: str, path: str) -> None:
    """Write an SVG string to disk."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(svg_text)


def export_png(svg_text: str, path: str) -> None:
    from cairosvg import svg2png

    svg2png(bytestring=svg_text.encode("utf-8"), write_to=str(path))


def export_pdf(svg_text: str, path: str) -> None:
    from cairosvg import svg2pdf

    svg2pdf(bytestring=svg_text.encode("utf-8"), write_to=str(path))


_EXPORTERS = {
    ".svg": save_svg,
    ".png": export_png,
    ".pdf": export_pdf,
}


def export_image(svg_text: str, path: str) -> None:
    """Write ``svg_text`` in the format named by the file suffix (.svg, .png, .pdf)."""
    suffix = Path(path).suffix.lower()
    exporter = _EXPORTERS.get(suffix)
    if exporter is None:
        raise ValueError(f"unsupported output format '{suffix}' (use .svg, .png or .pdf)")
    exporter(svg_text, str(path))
    _log(f"output: wrote {path}")
