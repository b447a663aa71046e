import csv
import io
import random
import re
import zipfile
from pathlib import Path

import streamlit as st

import svg_renderer as svg
import wordsearch_engine as eng


def load_css(path: str | Path) -> None:
    css_path = Path(path)
    if not css_path.exists():
        return
    css = css_path.read_text(encoding="utf-8")
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)


# ---- preview helper: scale an SVG to a target pixel width (keeps aspect) ----

def _scale_svg_for_preview(svg_text: str, target_width_px: int) -> tuple[str, int]:
    """
    Returns (scaled_svg_text, new_height_px).
    Only used for UI preview; original SVGs stay full size for ZIP/PNG/PDF.
    """
    s = svg_text
    m = re.search(r'viewBox="0\s+0\s+([\d.]+)\s+([\d.]+)"', s)
    if not m:
        return s, 600  # fallback
    vw, vh = float(m.group(1)), float(m.group(2))

    scale = max(0.05, float(target_width_px) / max(1.0, vw))
    new_h = max(50, int(round(vh * scale)))

    # rewrite width/height only on the <svg ...> tag
    s = re.sub(r'(<svg\b[^>]*\bwidth=")[^"]+(")', rf'\g<1>{int(target_width_px)}\g<2>', s, count=1)
    s = re.sub(r'(<svg\b[^>]*\bheight=")[^"]+(")', rf'\g<1>{new_h}\g<2>', s, count=1)
    return s, new_h


def _words_from_upload(upload, column: str | None) -> list[str]:
    """Plain text: one word per line. CSV: the chosen column."""
    text = upload.getvalue().decode("utf-8-sig")
    if upload.name.lower().endswith(".csv"):
        rows = [[c.strip() for c in r] for r in csv.reader(io.StringIO(text))]
        cols = eng.wordlists_from_rows(rows, first_row_header=True)
        return cols.get(column or "", [])
    return eng.parse_wordlist(text)


def _csv_headers(upload) -> list[str]:
    text = upload.getvalue().decode("utf-8-sig")
    first = next(csv.reader(io.StringIO(text)), [])
    return [h.strip() for h in first if h.strip()]


st.set_page_config(page_title="Wordsearch Generator", layout="wide")
load_css(Path(__file__).with_name("styles.css"))
st.title("Wordsearch Generator")


# --- Controls in the sidebar ---
with st.sidebar:
    tab_create, tab_settings = st.tabs(["Create Puzzle", "Settings"])

    # ---------------------------
    # TAB 1: Create Puzzle
    # ---------------------------
    with tab_create:
        pasted = st.text_area("Words (one per line)", "", height=180)
        word_file = st.file_uploader("...or a word list (TXT or CSV)", type=["txt", "csv"])
        csv_column = None
        if word_file is not None and word_file.name.lower().endswith(".csv"):
            headers = _csv_headers(word_file)
            csv_column = st.selectbox("CSV column", headers) if headers else None

        r1c1, r1c2 = st.columns(2)
        with r1c1:
            grid_size = st.number_input("Grid size (0 = auto)", 0, 30, 0, format="%d")
        with r1c2:
            n_puzzles = st.number_input("# puzzles", 1, 100, 1, format="%d")

        seed = st.text_input("Seed (optional)", "")
        directions = st.multiselect("Directions", list(eng.ALL_DIRECTIONS), default=list(eng.ALL_DIRECTIONS))

        go = st.button("Generate", type="primary", use_container_width=True)

    # ---------------------------
    # TAB 2: Settings
    # ---------------------------
    with tab_settings:
        st.caption("Generator")
        density = st.slider("Fill density target", 0.2, 1.0, 0.5, 0.05)
        attempts = st.number_input("Attempts per word", 10, 5000, 300, format="%d")
        resize_retries = st.number_input("Grid resize retries", 0, 10, 3, format="%d")
        alphabet = st.text_input("Filler alphabet", eng.PuzzleConfig.alphabet)

        st.caption("Look")
        legend_columns = st.number_input("Word list columns", 1, 6, 3, format="%d")
        mark_style = st.radio("Solution marks", ["highlight", "circle"], horizontal=True)

        st.caption("Output formats")
        make_png = st.checkbox("Also make PNG", value=True)
        make_pdf = st.checkbox("Also make PDF", value=False)
        make_pptx = st.checkbox("Also make PPTX (simple insert)", value=False)

        st.caption("Preview")
        size_label = st.select_slider("Preview size", options=["Small", "Medium", "Large"], value="Medium")
        PREVIEW_W = {"Small": 420, "Medium": 560, "Large": 720}[size_label]


if go:
    raw_words = eng.parse_wordlist(pasted)
    if word_file is not None:
        raw_words += _words_from_upload(word_file, csv_column)

    log_lines: list[str] = []
    eng.set_logger(log_lines.append)
    svg.set_logger(log_lines.append)

    config = eng.PuzzleConfig(
        alphabet=(alphabet or "").strip().upper(),
        fill_density_target=float(density),
        max_placement_attempts_per_word=int(attempts),
        directions=list(directions),
        max_resize_retries=int(resize_retries),
        seed=seed or None,
    )
    look = svg.Appearance(
        legend_columns=int(legend_columns),
        solution_mark_style=mark_style,
    )

    try:
        rng = random.Random(seed or None)
        results = eng.generate_batch(raw_words, int(n_puzzles), config, rng, size=int(grid_size) or None)
    except eng.WordsearchError as e:
        st.error(f"Puzzle generation failed: {e}")
        with st.expander("Log"):
            st.code("\n".join(log_lines) or "(empty)")
        st.stop()
    finally:
        eng.set_logger(None)
        svg.set_logger(None)

    svgs = []
    for idx, res in enumerate(results, 1):
        svgs.append((f"puzzle_{idx:03d}.svg", svg.render_puzzle_svg(res, look)))
        svgs.append((f"solution_{idx:03d}.svg", svg.render_solution_svg(res, look)))

    # --- Previews (tabs) ---
    tab_puz, tab_sol = st.tabs(["Preview — Puzzle", "Preview — Solution"])
    with tab_puz:
        svgp, hp = _scale_svg_for_preview(svgs[0][1], PREVIEW_W)
        st.components.v1.html(svgp, height=hp + 6, scrolling=False)
    with tab_sol:
        svg_sol_preview, hs = _scale_svg_for_preview(svgs[1][1], PREVIEW_W)
        st.components.v1.html(svg_sol_preview, height=hs + 6, scrolling=False)

    with st.expander("Log"):
        st.code("\n".join(log_lines) or "(empty)")

    # --- ZIP outputs ---
    imgs_for_pptx = []
    mem = io.BytesIO()
    with zipfile.ZipFile(mem, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, s in svgs:
            zf.writestr(name, s)

        if make_png or make_pdf or make_pptx:
            from cairosvg import svg2pdf, svg2png

            for name, s in svgs:
                if make_png or (make_pptx and name.startswith("puzzle_")):
                    png = svg2png(bytestring=s.encode("utf-8"))
                    if make_png:
                        zf.writestr(name.replace(".svg", ".png"), png)
                    if make_pptx and name.startswith("puzzle_"):
                        imgs_for_pptx.append(png)
                if make_pdf:
                    zf.writestr(name.replace(".svg", ".pdf"), svg2pdf(bytestring=s.encode("utf-8")))

        if make_pptx and imgs_for_pptx:
            from pptx import Presentation
            from pptx.util import Inches

            prs = Presentation()
            blank = prs.slide_layouts[6]
            for png in imgs_for_pptx:
                slide = prs.slides.add_slide(blank)
                slide.shapes.add_picture(io.BytesIO(png), Inches(0.5), Inches(0.5), height=Inches(6.5))
            out = io.BytesIO()
            prs.save(out)
            zf.writestr("puzzles.pptx", out.getvalue())

    mem.seek(0)
    st.download_button("Download ZIP", data=mem.read(), file_name="wordsearch.zip", mime="application/zip")
