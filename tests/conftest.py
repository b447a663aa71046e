import pytest

import svg_renderer as svg
import wordsearch_engine as eng


@pytest.fixture(autouse=True)
def log_lines():
    """Collect engine and renderer log lines instead of printing them."""
    lines = []
    eng.set_logger(lines.append)
    svg.set_logger(lines.append)
    yield lines
    eng.set_logger(None)
    svg.set_logger(None)


@pytest.fixture
def solved():
    def _check(result):
        """Every placed word reads back from its cells along a straight line."""
        for word, pw in result.solutions.items():
            assert pw.text == word
            assert len(pw.cells) == len(word)
            assert pw.cells[0] == pw.start
            dr, dc = eng.DIR_VECTORS[pw.direction]
            for (r0, c0), (r1, c1) in zip(pw.cells, pw.cells[1:]):
                assert (r1 - r0, c1 - c0) == (dr, dc)
            for r, c in pw.cells:
                assert 0 <= r < result.size and 0 <= c < result.size
            assert result.word_at(pw) == word
    return _check
