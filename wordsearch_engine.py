from __future__ import annotations

import csv
import math
import random
import string
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Literal, Optional, Sequence, Tuple

# 8 compass directions for placement (row delta, col delta)
DIR_VECTORS = {
    "E":  (0, 1),
    "W":  (0, -1),
    "N":  (-1, 0),
    "S":  (1, 0),
    "NE": (-1, 1),
    "SE": (1, 1),
    "SW": (1, -1),
    "NW": (-1, -1),
}
ALL_DIRECTIONS: Tuple[str, ...] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

Direction = Literal["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
Candidate = Tuple[int, int, str]  # (row, col, direction)


# -----------------------------------------------------------------------------
# Simple logger hook
# -----------------------------------------------------------------------------
# The CLI and the web UI call set_logger(...). If nobody does, we print().
_LOGGER: Optional[Callable[[str], None]] = None


def set_logger(fn: Optional[Callable[[str], None]]) -> None:
    """Allow the UI to inject a logger callback: fn(text: str). None resets to print."""
    global _LOGGER
    _LOGGER = fn


def _log(msg: str) -> None:
    """Log to the injected callback if available; otherwise print."""
    if _LOGGER:
        _LOGGER(msg)
        return
    print(msg)


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------
class WordsearchError(Exception):
    """Base exception for puzzle generation failures."""


class ConfigError(WordsearchError):
    """Raised when a PuzzleConfig holds an unusable value."""


class EmptyWordList(WordsearchError):
    """Raised when normalization leaves no usable word."""

    def __init__(self, message: str = "no usable words after normalization") -> None:
        super().__init__(message)


class WordTooLong(WordsearchError):
    """Raised when a word cannot fit even the largest allowed grid."""

    def __init__(self, word: str, max_dimension: int) -> None:
        self.word = word
        self.max_dimension = max_dimension
        super().__init__(
            f"word '{word}' has {len(word)} letters; the grid is at most {max_dimension} wide"
        )


class UnplaceableWord(WordsearchError):
    """Raised when the attempt budget for a word runs out at a given grid size."""

    def __init__(self, word: str, grid_size: int, attempts: int = 0) -> None:
        self.word = word
        self.grid_size = grid_size
        self.attempts = attempts
        super().__init__(
            f"could not place '{word}' in a {grid_size}x{grid_size} grid after {attempts} attempts"
        )


class GridFrozenError(WordsearchError):
    """Raised on a write to a grid that was already handed to the renderer."""


# -----------------------------------------------------------------------------
# Data shapes used across the app
# -----------------------------------------------------------------------------
@dataclass
class PuzzleConfig:
    """
    Knobs for one puzzle build. Defaults match the command line defaults.
    """
    alphabet: str = string.ascii_uppercase
    max_grid_dimension: int = 30
    fill_density_target: float = 0.5
    max_placement_attempts_per_word: int = 300
    directions: List[str] = field(default_factory=lambda: list(ALL_DIRECTIONS))
    resize_step: int = 2
    max_resize_retries: int = 3
    seed: Optional[str] = None

    def validate(self) -> "PuzzleConfig":
        if not self.alphabet:
            raise ConfigError("alphabet must not be empty")
        if self.alphabet != self.alphabet.upper() or not all(ch.isalpha() for ch in self.alphabet):
            raise ConfigError(f"alphabet must be uppercase letters, got '{self.alphabet}'")
        if self.max_grid_dimension < 2:
            raise ConfigError("max_grid_dimension must be at least 2")
        if not (0.0 < self.fill_density_target <= 1.0):
            raise ConfigError(
                f"fill_density_target must be in (0, 1], got {self.fill_density_target}"
            )
        if self.max_placement_attempts_per_word < 1:
            raise ConfigError("max_placement_attempts_per_word must be positive")
        if self.resize_step < 1:
            raise ConfigError("resize_step must be positive")
        if self.max_resize_retries < 0:
            raise ConfigError("max_resize_retries must not be negative")
        if not self.directions:
            raise ConfigError("at least one direction is required")
        unknown = [d for d in self.directions if d not in DIR_VECTORS]
        if unknown:
            raise ConfigError(f"unknown direction(s): {', '.join(map(str, unknown))}")
        return self


@dataclass(frozen=True)
class PlacedWord:
    """One placed word with its path in the grid."""
    text: str
    start: Tuple[int, int]  # (row, col)
    direction: Direction
    cells: Tuple[Tuple[int, int], ...]  # all grid coordinates used, in letter order

    @property
    def end(self) -> Tuple[int, int]:
        return self.cells[-1]


@dataclass
class PuzzleResult:
    """
    The outcome of the generator. This is what the renderer needs.
    """
    size: int
    letters: List[List[str]]                 # final grid of letters
    used_mask: List[List[bool]]              # True where a placed word letter sits
    solutions: Dict[str, PlacedWord]         # word -> placement, in placement order
    legend: List[str]                        # words shown under the grid, A→Z
    seed: Optional[str] = None
    attempts: int = 1                        # grid sizes tried before this one succeeded

    @property
    def placed_words(self) -> List[PlacedWord]:
        """Placements sorted A→Z, the order the renderer draws them in."""
        return sorted(self.solutions.values(), key=lambda pw: pw.text)

    def word_at(self, placed: PlacedWord) -> str:
        return "".join(self.letters[r][c] for (r, c) in placed.cells)


# -----------------------------------------------------------------------------
# Grid
# -----------------------------------------------------------------------------
class Grid:
    """
    Square N×N buffer; None marks a cell nobody has written yet.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"grid size must be positive, got {size}")
        self.size = size
        self._cells: List[List[Optional[str]]] = [[None for _ in range(size)] for _ in range(size)]
        self._frozen = False

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, row: int, col: int) -> Optional[str]:
        return self._cells[row][col]

    def set(self, row: int, col: int, ch: str) -> None:
        if self._frozen:
            raise GridFrozenError(f"grid is frozen; cannot write ({row}, {col})")
        self._cells[row][col] = ch

    def is_empty(self, row: int, col: int) -> bool:
        return self._cells[row][col] is None

    def empty_cells(self) -> Iterator[Tuple[int, int]]:
        for r in range(self.size):
            for c in range(self.size):
                if self._cells[r][c] is None:
                    yield (r, c)

    def empty_count(self) -> int:
        return sum(1 for _ in self.empty_cells())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def rows(self) -> List[List[Optional[str]]]:
        """A copy of the cells, row by row."""
        return [list(row) for row in self._cells]


# -----------------------------------------------------------------------------
# Helpers: normalization and sizing
# -----------------------------------------------------------------------------
def normalize_word(text: str, alphabet: str = string.ascii_uppercase) -> str:
    """
    Uppercase and keep only characters from the alphabet. Letters the alphabet
    lacks are folded to their base letters, so with A–Z "Café" becomes "CAFE",
    while an alphabet holding Ñ keeps "AÑO" intact. Spaces and punctuation
    disappear, so "ice cream!" becomes "ICECREAM".
    """
    if not text:
        return ""
    allowed = set(unicodedata.normalize("NFC", alphabet))
    out = []
    for ch in unicodedata.normalize("NFC", text.strip().upper()):
        if ch in allowed:
            out.append(ch)
            continue
        out.extend(part for part in unicodedata.normalize("NFKD", ch) if part in allowed)
    return "".join(out)


def normalize_words(words: Sequence[str], config: Optional[PuzzleConfig] = None) -> List[str]:
    """
    Clean the raw word list, keeping input order (it is the placement order).

    Drops empty results, single letters and duplicates, logging each drop. A word longer than
    ``max_grid_dimension`` aborts with WordTooLong; an empty outcome raises
    EmptyWordList.
    """
    cfg = config or PuzzleConfig()
    seen = set()
    out: List[str] = []
    for raw in words:
        norm = normalize_word(raw, cfg.alphabet)
        if not norm:
            _log(f"normalize: dropping '{raw}' (no letters from the alphabet)")
            continue
        if len(norm) < 2:
            _log(f"normalize: dropping '{raw}' (a word needs at least 2 letters)")
            continue
        if len(norm) > cfg.max_grid_dimension:
            raise WordTooLong(norm, cfg.max_grid_dimension)
        if norm in seen:
            _log(f"normalize: dropping duplicate '{raw}'")
            continue
        seen.add(norm)
        out.append(norm)
    if not out:
        raise EmptyWordList()
    return out


def compute_grid_size(words: Sequence[str], density: float = 0.5) -> int:
    """
    Smallest N that holds the longest word and keeps the letters near
    ``density`` of the N×N cells. A heuristic; placement may still fail.
    """
    if not words:
        raise EmptyWordList()
    if not (0.0 < density <= 1.0):
        raise ConfigError(f"density must be in (0, 1], got {density}")
    longest = max(len(w) for w in words)
    letters = sum(len(w) for w in words)
    by_density = math.ceil(math.sqrt(letters / density))
    return max(2, longest, by_density)


# -----------------------------------------------------------------------------
# Placement
# -----------------------------------------------------------------------------
def _start_range(delta: int, length: int, size: int) -> range:
    """Starts along one axis that keep a word of this length in bounds."""
    if delta < 0:
        return range(length - 1, size)
    if delta > 0:
        return range(0, size - length + 1)
    return range(0, size)


def candidate_placements(length: int, size: int, directions: Sequence[str] = ALL_DIRECTIONS) -> List[Candidate]:
    """Every (row, col, direction) where a word of ``length`` fits inside an N×N grid."""
    out: List[Candidate] = []
    for d in directions:
        dr, dc = DIR_VECTORS[d]
        for r in _start_range(dr, length, size):
            for c in _start_range(dc, length, size):
                out.append((r, c, d))
    return out


def word_cells(word: str, row: int, col: int, direction: str) -> List[Tuple[int, int]]:
    dr, dc = DIR_VECTORS[direction]
    return [(row + dr * i, col + dc * i) for i in range(len(word))]


def _can_place_word(grid: Grid, word: str, row: int, col: int, direction: str) -> bool:
    """Check bounds and compatibility (allow crossing on identical letters)."""
    for (r, c), ch in zip(word_cells(word, row, col, direction), word):
        if not grid.in_bounds(r, c):
            return False
        cell = grid.get(r, c)
        if cell is not None and cell != ch:
            return False
    return True


def _place_one_word(grid: Grid, word: str, row: int, col: int, direction: str) -> PlacedWord:
    """Write the word on the grid and return its placement."""
    cells = word_cells(word, row, col, direction)
    for (r, c), ch in zip(cells, word):
        grid.set(r, c, ch)
    return PlacedWord(text=word, start=(row, col), direction=direction, cells=tuple(cells))


def place_word(grid: Grid, word: str, rng: random.Random, config: PuzzleConfig) -> PlacedWord:
    """
    Try shuffled candidates for one word, up to the attempt budget, and commit
    the first one that agrees with every letter already on the grid.
    """
    candidates = candidate_placements(len(word), grid.size, config.directions)
    rng.shuffle(candidates)
    budget = min(len(candidates), config.max_placement_attempts_per_word)
    for row, col, d in candidates[:budget]:
        if _can_place_word(grid, word, row, col, d):
            return _place_one_word(grid, word, row, col, d)
    raise UnplaceableWord(word, grid.size, budget)


def place_words(grid: Grid, words: Sequence[str], rng: random.Random, config: PuzzleConfig) -> Dict[str, PlacedWord]:
    """
    Greedy single pass in input order. Earlier words are never moved, so the
    first word that finds no slot ends the attempt.
    """
    solutions: Dict[str, PlacedWord] = {}
    for word in words:
        try:
            solutions[word] = place_word(grid, word, rng, config)
        except UnplaceableWord as e:
            _log(f"place: {e}")
            raise
    return solutions


def fill_grid(grid: Grid, rng: random.Random, alphabet: str = string.ascii_uppercase) -> int:
    """
    Fill empty cells with random letters from the alphabet. Returns how many
    cells were filled.
    """
    filled = 0
    for r, c in list(grid.empty_cells()):
        grid.set(r, c, rng.choice(alphabet))
        filled += 1
    return filled


# ---------------------------------------------------------------------------
# High-level API
# ---------------------------------------------------------------------------
def _make_rng(seed: Optional[str]) -> random.Random:
    if seed is None or str(seed).strip() == "":
        _log("seed: none (non-deterministic)")
        return random.Random()
    _log(f"seed: {seed}")
    return random.Random(str(seed))


def build_puzzle(
    words: Sequence[str],
    size: int,
    config: PuzzleConfig,
    rng: random.Random,
    display: Optional[Dict[str, str]] = None,
) -> PuzzleResult:
    """
    One attempt at a fixed size. ``words`` must already be normalized.
    Raises UnplaceableWord when a word finds no slot.
    """
    grid = Grid(size)
    solutions = place_words(grid, words, rng, config)

    used = [[not grid.is_empty(r, c) for c in range(size)] for r in range(size)]
    filled = fill_grid(grid, rng, config.alphabet)
    grid.freeze()
    _log(f"build: placed {len(solutions)} words in {size}x{size}, filled {filled} cells")

    disp = display or {}
    legend = sorted((disp.get(w, w) for w in solutions), key=lambda s: normalize_word(s, config.alphabet))
    return PuzzleResult(
        size=size,
        letters=[[ch or "" for ch in row] for row in grid.rows()],
        used_mask=used,
        solutions=solutions,
        legend=legend,
        seed=config.seed,
    )


def _display_map(raw_words: Sequence[str], alphabet: str) -> Dict[str, str]:
    """Map normalized -> first original spelling, for the legend."""
    out: Dict[str, str] = {}
    for w in raw_words:
        n = normalize_word(w, alphabet)
        if n and n not in out:
            out[n] = w.strip()
    return out


def generate_puzzle(
    words: Sequence[str],
    config: Optional[PuzzleConfig] = None,
    rng: Optional[random.Random] = None,
    size: Optional[int] = None,
) -> PuzzleResult:
    """
    Orchestrator:
      - normalize the word list (may raise EmptyWordList / WordTooLong)
      - pick N from the sizer unless ``size`` is given
      - place + fill; on UnplaceableWord grow N by resize_step and start over
      - give up after max_resize_retries, re-raising the last failure

    If rng is provided we keep consuming it (batches stay in one sequence);
    otherwise a local rng is seeded from config.seed.
    """
    cfg = (config or PuzzleConfig()).validate()
    _rng = rng if rng is not None else _make_rng(cfg.seed)

    norm = normalize_words(words, cfg)
    display = _display_map(words, cfg.alphabet)

    if size is not None and size < 2:
        raise ConfigError(f"grid size must be at least 2, got {size}")
    n = size if size is not None else compute_grid_size(norm, cfg.fill_density_target)
    if n > cfg.max_grid_dimension:
        _log(f"size: {n} exceeds max dimension, clamping to {cfg.max_grid_dimension}")
        n = cfg.max_grid_dimension
    _log(f"size: {n}x{n} for {len(norm)} words ({sum(map(len, norm))} letters)")

    attempt = 1
    while True:
        try:
            result = build_puzzle(norm, n, cfg, _rng, display)
            result.attempts = attempt
            return result
        except UnplaceableWord as e:
            if attempt > cfg.max_resize_retries or n >= cfg.max_grid_dimension:
                raise
            grown = min(n + cfg.resize_step, cfg.max_grid_dimension)
            _log(f"[resize] '{e.word}' did not fit in {n}x{n}; retrying at {grown}x{grown}")
        n = grown
        attempt += 1


def generate_batch(
    words: Sequence[str],
    count: int,
    config: Optional[PuzzleConfig] = None,
    rng: Optional[random.Random] = None,
    size: Optional[int] = None,
) -> List[PuzzleResult]:
    """
    Several independent puzzles from one word list. Each gets its own grid;
    only the random source is shared, so a seeded batch is reproducible.
    """
    cfg = (config or PuzzleConfig()).validate()
    _rng = rng if rng is not None else _make_rng(cfg.seed)
    return [generate_puzzle(words, cfg, _rng, size) for _ in range(max(0, int(count)))]


# -----------------------------------------------------------------------------
# Word list loading (CLI and UI call these)
# -----------------------------------------------------------------------------
def parse_wordlist(text: str) -> List[str]:
    """One entry per line. Blank lines and # comments are skipped."""
    entries: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.append(line)
    return entries


def load_wordlist(path: str) -> List[str]:
    """Read a plain text word list; an empty file raises EmptyWordList."""
    with open(path, "r", encoding="utf-8-sig") as f:
        entries = parse_wordlist(f.read())
    if not entries:
        raise EmptyWordList(f"empty word list: {path}")
    _log(f"wordlist: loaded {len(entries)} entries from {path}")
    return entries


def _read_rows(path: str) -> List[List[str]]:
    """Read CSV rows as lists of strings. Strip whitespace in each cell."""
    rows: List[List[str]] = []
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        for r in csv.reader(f):
            rows.append([c.strip() for c in r])
    _log(f"csv: loaded {len(rows)} rows from {path}")
    return rows


def wordlists_from_rows(rows: List[List[str]], first_row_header: bool = True) -> Dict[str, List[str]]:
    """
    Each column becomes a named list: {header: [words...]}.
    Blank cells are ignored.
    """
    if not rows:
        return {}
    if first_row_header:
        headers = rows[0]
        data_rows = rows[1:]
    else:
        # Create generic headers Col1, Col2, ...
        max_cols = max(len(r) for r in rows)
        headers = [f"Col{i+1}" for i in range(max_cols)]
        data_rows = rows

    cols: Dict[str, List[str]] = {h: [] for h in headers}
    for r in data_rows:
        for i, h in enumerate(headers):
            if i < len(r) and r[i]:
                cols[h].append(r[i])
    return cols


def load_wordlists_csv(path: str, first_row_header: bool = True) -> Dict[str, List[str]]:
    """Load a multi-column wordlist CSV."""
    cols = wordlists_from_rows(_read_rows(path), first_row_header)
    _log(f"wordlists: {len(cols)} columns")
    return cols


def render_preview_ascii(result: PuzzleResult) -> str:
    """
    Simple ASCII for quick debugging.
    """
    lines = []
    for row in result.letters:
        lines.append(" ".join(ch if ch else "." for ch in row))
    return "\n".join(lines)
