"""Tests for wordsearch_engine.py."""

import random
import string

import pytest

import wordsearch_engine as eng
from wordsearch_engine import (
    ConfigError,
    EmptyWordList,
    Grid,
    GridFrozenError,
    PuzzleConfig,
    UnplaceableWord,
    WordTooLong,
)


SPANISH = "ABCDEFGHIJKLMNÑOPQRSTUVWXYZ"
RUSSIAN = "АБВГДЕЁЖЗИЙКЛМНОПРСТУФХЦЧШЩЪЫЬЭЮЯ"


def _fill(grid, ch):
    for r in range(grid.size):
        for c in range(grid.size):
            grid.set(r, c, ch)


class TestNormalize:
    def test_strips_and_uppercases(self):
        assert eng.normalize_word("  cat ") == "CAT"
        assert eng.normalize_word("ice-cream!") == "ICECREAM"
        assert eng.normalize_word("Café") == "CAFE"
        assert eng.normalize_word("") == ""

    def test_keeps_input_order(self):
        assert eng.normalize_words(["dog", "Cat", "emu"]) == ["DOG", "CAT", "EMU"]

    def test_drops_duplicates_and_single_letters(self, log_lines):
        assert eng.normalize_words(["cat", "a", "CAT", " Cat ", "dog"]) == ["CAT", "DOG"]
        assert any("duplicate" in line for line in log_lines)
        assert any("at least 2 letters" in line for line in log_lines)

    def test_empty_after_normalization(self):
        with pytest.raises(EmptyWordList):
            eng.normalize_words([""])
        with pytest.raises(EmptyWordList):
            eng.normalize_words(["  ", "!!", "42"])

    def test_word_too_long_aborts(self):
        with pytest.raises(WordTooLong) as exc:
            eng.normalize_words(["cat", "A" * 31])
        assert exc.value.word == "A" * 31
        assert exc.value.max_dimension == 30

    def test_custom_max_dimension(self):
        cfg = PuzzleConfig(max_grid_dimension=5)
        assert eng.normalize_words(["ABCDE"], cfg) == ["ABCDE"]
        with pytest.raises(WordTooLong):
            eng.normalize_words(["ABCDEF"], cfg)

    def test_keeps_letters_the_alphabet_holds(self):
        assert eng.normalize_word("niño", SPANISH) == "NIÑO"
        assert eng.normalize_word("Café", SPANISH) == "CAFE"
        assert eng.normalize_word("йогурт", RUSSIAN) == "ЙОГУРТ"
        assert eng.normalize_word("ёж", RUSSIAN) == "ЁЖ"
        # without Ñ in the alphabet the accent is folded away
        assert eng.normalize_word("año") == "ANO"

    def test_logs_entries_without_letters(self, log_lines):
        assert eng.normalize_words(["!!", "cat"]) == ["CAT"]
        assert any("'!!'" in line and "no letters" in line for line in log_lines)


class TestGridSize:
    def test_default_density(self):
        # 6 letters -> ceil(sqrt(12)) == 4
        assert eng.compute_grid_size(["CAT", "DOG"]) == 4

    def test_longest_word_wins(self):
        assert eng.compute_grid_size(["ABCDEFGHIJ"]) == 10

    def test_full_density(self):
        assert eng.compute_grid_size(["CAT", "DOG"], density=1.0) == 3

    def test_monotone_in_letter_count(self):
        rng = random.Random(3)
        words = []
        last = 0
        for _ in range(60):
            length = rng.randint(2, 12)
            words.append("".join(rng.choice(string.ascii_uppercase) for _ in range(length)))
            n = eng.compute_grid_size(words)
            assert n >= last
            last = n

    def test_rejects_bad_density(self):
        with pytest.raises(ConfigError):
            eng.compute_grid_size(["CAT"], density=0)
        with pytest.raises(EmptyWordList):
            eng.compute_grid_size([])


class TestCandidates:
    def test_count_for_three_in_three(self):
        # 4 axis directions x 3 starts + 4 diagonals x 1 start
        assert len(eng.candidate_placements(3, 3)) == 16

    def test_single_cell_word_fits_everywhere(self):
        assert len(eng.candidate_placements(1, 3)) == 3 * 3 * 8

    def test_word_longer_than_grid(self):
        assert eng.candidate_placements(4, 3) == []

    def test_all_candidates_in_bounds(self):
        for row, col, d in eng.candidate_placements(4, 6):
            for r, c in eng.word_cells("ABCD", row, col, d):
                assert 0 <= r < 6 and 0 <= c < 6

    def test_direction_filter(self):
        cands = eng.candidate_placements(2, 4, ["E"])
        assert {d for _, _, d in cands} == {"E"}
        assert len(cands) == 4 * 3


class TestGrid:
    def test_starts_empty(self):
        grid = Grid(4)
        assert grid.empty_count() == 16
        assert grid.get(0, 0) is None

    def test_frozen_grid_rejects_writes(self):
        grid = Grid(2)
        grid.set(0, 0, "A")
        grid.freeze()
        assert grid.frozen
        with pytest.raises(GridFrozenError):
            grid.set(1, 1, "B")

    def test_rows_is_a_copy(self):
        grid = Grid(2)
        rows = grid.rows()
        rows[0][0] = "Z"
        assert grid.get(0, 0) is None


class TestPlacement:
    def test_avoids_conflicting_rows(self):
        grid = Grid(3)
        for c in range(3):
            grid.set(0, c, "X")
        pw = eng.place_word(grid, "ABC", random.Random(1), PuzzleConfig(directions=["E"]))
        assert pw.start[0] in (1, 2)
        assert [grid.get(r, c) for r, c in pw.cells] == ["A", "B", "C"]

    def test_overlap_on_matching_letters(self):
        grid = Grid(3)
        for c in range(3):
            grid.set(0, c, "X")
            grid.set(1, c, "CAT"[c])
            grid.set(2, c, "X")
        pw = eng.place_word(grid, "CAT", random.Random(9), PuzzleConfig(directions=["E"]))
        assert pw.start == (1, 0)
        assert pw.cells == ((1, 0), (1, 1), (1, 2))

    def test_unplaceable_on_full_grid(self):
        grid = Grid(3)
        _fill(grid, "X")
        with pytest.raises(UnplaceableWord) as exc:
            eng.place_word(grid, "AB", random.Random(0), PuzzleConfig())
        assert exc.value.word == "AB"
        assert exc.value.grid_size == 3
        # 2-letter word in 3x3: 4 axis dirs x 6 + 4 diagonals x 4
        assert exc.value.attempts == 40

    def test_attempt_budget_is_respected(self):
        grid = Grid(3)
        _fill(grid, "X")
        with pytest.raises(UnplaceableWord) as exc:
            eng.place_word(grid, "AB", random.Random(0), PuzzleConfig(max_placement_attempts_per_word=5))
        assert exc.value.attempts == 5

    def test_place_words_keeps_input_order(self):
        grid = Grid(6)
        solutions = eng.place_words(grid, ["DOG", "CAT", "EMU"], random.Random(4), PuzzleConfig())
        assert list(solutions) == ["DOG", "CAT", "EMU"]

    def test_fill_uses_alphabet(self):
        grid = Grid(5)
        grid.set(2, 2, "Q")
        filled = eng.fill_grid(grid, random.Random(1), "XY")
        assert filled == 24
        assert grid.empty_count() == 0
        assert grid.get(2, 2) == "Q"
        for r in range(5):
            for c in range(5):
                if (r, c) != (2, 2):
                    assert grid.get(r, c) in "XY"


class TestConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"alphabet": ""},
            {"alphabet": "abc"},
            {"alphabet": "AB1"},
            {"fill_density_target": 0.0},
            {"fill_density_target": 1.5},
            {"max_placement_attempts_per_word": 0},
            {"max_grid_dimension": 1},
            {"max_resize_retries": -1},
            {"directions": []},
            {"directions": ["UP"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            PuzzleConfig(**kwargs).validate()

    def test_defaults_are_valid(self):
        cfg = PuzzleConfig().validate()
        assert cfg.alphabet == string.ascii_uppercase
        assert cfg.max_grid_dimension == 30
        assert sorted(cfg.directions) == sorted(eng.ALL_DIRECTIONS)


class TestGeneratePuzzle:
    def test_cat_and_dog(self, solved):
        result = eng.generate_puzzle(["CAT", "DOG"], rng=random.Random(7))
        assert result.size >= 3
        assert set(result.solutions) == {"CAT", "DOG"}
        solved(result)

    def test_grid_is_completely_filled(self):
        cfg = PuzzleConfig(alphabet="ABC")
        result = eng.generate_puzzle(["ABBA", "CAB", "BAC"], cfg, rng=random.Random(2))
        assert len(result.letters) == result.size
        for row in result.letters:
            assert len(row) == result.size
            for ch in row:
                assert len(ch) == 1 and ch in "ABC"

    def test_used_mask_matches_placements(self):
        result = eng.generate_puzzle(["PYTHON", "SNAKE", "CODE", "GRID"], rng=random.Random(11))
        covered = {cell for pw in result.solutions.values() for cell in pw.cells}
        for r in range(result.size):
            for c in range(result.size):
                assert result.used_mask[r][c] == ((r, c) in covered)

    def test_many_words(self, solved):
        words = ["ALPHA", "BRAVO", "CHARLIE", "DELTA", "ECHO", "FOXTROT", "GOLF",
                 "HOTEL", "INDIA", "JULIET", "KILO", "LIMA", "MIKE", "NOVEMBER"]
        result = eng.generate_puzzle(words, rng=random.Random(5))
        assert len(result.solutions) == len(words)
        solved(result)

    def test_same_seed_same_puzzle(self):
        words = ["ORANGE", "PURPLE", "YELLOW", "GREEN", "BLUE", "RED"]
        a = eng.generate_puzzle(words, rng=random.Random(42))
        b = eng.generate_puzzle(words, rng=random.Random(42))
        assert a.letters == b.letters
        assert a.solutions == b.solutions

    def test_config_seed(self, log_lines):
        words = ["ORANGE", "PURPLE", "YELLOW"]
        a = eng.generate_puzzle(words, PuzzleConfig(seed="puzzle-1"))
        b = eng.generate_puzzle(words, PuzzleConfig(seed="puzzle-1"))
        assert a.letters == b.letters
        assert a.seed == "puzzle-1"
        assert "seed: puzzle-1" in log_lines

    def test_empty_word_list(self):
        with pytest.raises(EmptyWordList):
            eng.generate_puzzle([""])

    def test_word_too_long(self):
        with pytest.raises(WordTooLong):
            eng.generate_puzzle(["A" * 31])

    def test_unplaceable_terminates(self):
        words = [chr(65 + i // 26) + chr(65 + i % 26) + "QWERTYUI" for i in range(50)]
        cfg = PuzzleConfig(max_resize_retries=0)
        with pytest.raises(UnplaceableWord) as exc:
            eng.generate_puzzle(words, cfg, rng=random.Random(1), size=5)
        assert exc.value.grid_size == 5
        assert exc.value.word == words[0]

    def test_accented_alphabet_places_words_as_listed(self, solved):
        cfg = PuzzleConfig(alphabet=SPANISH)
        result = eng.generate_puzzle(["niño", "año"], cfg, rng=random.Random(4))
        assert set(result.solutions) == {"NIÑO", "AÑO"}
        assert result.legend == ["año", "niño"]
        solved(result)
        for row in result.letters:
            assert all(ch in SPANISH for ch in row)

    def test_resize_gives_up_with_last_size(self, log_lines):
        cfg = PuzzleConfig(resize_step=2, max_resize_retries=1)
        with pytest.raises(UnplaceableWord) as exc:
            eng.generate_puzzle(["ABCDEFGHIJ"], cfg, rng=random.Random(1), size=5)
        assert exc.value.grid_size == 7
        assert sum("[resize]" in line for line in log_lines) == 1

    def test_resize_recovers(self, log_lines):
        cfg = PuzzleConfig(resize_step=2, max_resize_retries=3)
        result = eng.generate_puzzle(["ABCDEFGHIJ"], cfg, rng=random.Random(1), size=5)
        assert result.size == 11
        assert result.attempts == 4
        assert sum("[resize]" in line for line in log_lines) == 3

    def test_resize_stops_at_max_dimension(self):
        cfg = PuzzleConfig(max_grid_dimension=4, directions=["E"], max_resize_retries=5)
        with pytest.raises(UnplaceableWord) as exc:
            eng.generate_puzzle(["ABCD", "EFGH", "IJKL", "MNOP", "QRST"], cfg, rng=random.Random(3))
        assert exc.value.grid_size == 4

    def test_rejects_tiny_explicit_size(self):
        with pytest.raises(ConfigError):
            eng.generate_puzzle(["CAT"], size=1)

    def test_legend_keeps_display_spelling(self):
        result = eng.generate_puzzle(["Ice cream", "dog", "AT&T"], rng=random.Random(8))
        assert list(result.solutions) == ["ICECREAM", "DOG", "ATT"]
        assert result.legend == ["AT&T", "dog", "Ice cream"]
        assert [pw.text for pw in result.placed_words] == ["ATT", "DOG", "ICECREAM"]


class TestBatch:
    def test_independent_grids(self, solved):
        results = eng.generate_batch(["CAT", "DOG", "EMU"], 3, rng=random.Random(6))
        assert len(results) == 3
        assert len({id(r.letters) for r in results}) == 3
        for r in results:
            solved(r)

    def test_seeded_batch_is_reproducible(self):
        a = eng.generate_batch(["CAT", "DOG", "EMU"], 2, rng=random.Random(6))
        b = eng.generate_batch(["CAT", "DOG", "EMU"], 2, rng=random.Random(6))
        assert [r.letters for r in a] == [r.letters for r in b]

    def test_zero_count(self):
        assert eng.generate_batch(["CAT"], 0, rng=random.Random(1)) == []


class TestLoading:
    def test_load_wordlist(self, tmp_path):
        p = tmp_path / "words.txt"
        p.write_text("# animals\ncat\n\n  dog  \n", encoding="utf-8")
        assert eng.load_wordlist(str(p)) == ["cat", "dog"]

    def test_empty_wordlist_file(self, tmp_path):
        p = tmp_path / "words.txt"
        p.write_text("\n# nothing here\n", encoding="utf-8")
        with pytest.raises(EmptyWordList):
            eng.load_wordlist(str(p))

    def test_load_wordlists_csv(self, tmp_path):
        p = tmp_path / "lists.csv"
        p.write_text("Fruit,Colours\napple,red\npear,\n,blue\n", encoding="utf-8")
        assert eng.load_wordlists_csv(str(p)) == {
            "Fruit": ["apple", "pear"],
            "Colours": ["red", "blue"],
        }

    def test_csv_without_header(self, tmp_path):
        p = tmp_path / "lists.csv"
        p.write_text("apple,red\npear\n", encoding="utf-8")
        assert eng.load_wordlists_csv(str(p), first_row_header=False) == {
            "Col1": ["apple", "pear"],
            "Col2": ["red"],
        }


def test_ascii_preview():
    result = eng.generate_puzzle(["CAT", "DOG"], rng=random.Random(1))
    lines = eng.render_preview_ascii(result).splitlines()
    assert len(lines) == result.size
    assert lines[0] == " ".join(result.letters[0])


def test_print_fallback(capsys):
    eng.set_logger(None)
    eng._log("hello")
    assert capsys.readouterr().out == "hello\n"
