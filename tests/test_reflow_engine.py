"""
Unit Tests for Document Reflow Engine

Tests word wrap, page breaking and page geometry of reflowed documents.
"""

# Third-party
import fitz  # PyMuPDF
import pytest

# Local application
from pdfservice.models import PageGeometry
from pdfservice.reflow_engine import ReflowSettings, reflow, wrap_paragraph

SETTINGS = ReflowSettings(font_size=11.0, line_height_factor=1.6, margin=50.0)


# ============================================================================
# Test: wrap_paragraph
# ============================================================================

class TestWrapParagraph:
    """Tests for greedy word wrap (5.5pt per character at 11pt)."""

    def test_short_paragraph_is_one_line(self, monospace_font) -> None:
        assert wrap_paragraph("Hello world", monospace_font, 11.0, 495.0) == ["Hello world"]

    def test_wraps_at_width(self, monospace_font) -> None:
        """'aaaa bbbb' is 49.5pt wide, so a 45pt line holds one word."""
        lines = wrap_paragraph("aaaa bbbb cccc", monospace_font, 11.0, 45.0)
        assert lines == ["aaaa", "bbbb", "cccc"]

    def test_line_must_be_strictly_narrower(self, monospace_font) -> None:
        """A candidate exactly as wide as the line does not fit."""
        # "ab cd" is 5 chars = 27.5pt
        assert wrap_paragraph("ab cd", monospace_font, 11.0, 27.5) == ["ab", "cd"]

    def test_overlong_word_stands_alone(self, monospace_font) -> None:
        """A word wider than the line is placed on its own line, unsplit."""
        word = "x" * 200
        lines = wrap_paragraph(f"a {word} b", monospace_font, 11.0, 100.0)
        assert lines == ["a", word, "b"]

    def test_whitespace_runs_collapse(self, monospace_font) -> None:
        assert wrap_paragraph("  one   two\tthree ", monospace_font, 11.0, 495.0) == [
            "one two three"
        ]

    def test_blank_paragraph_has_no_lines(self, monospace_font) -> None:
        assert wrap_paragraph("   ", monospace_font, 11.0, 495.0) == []


# ============================================================================
# Test: reflow
# ============================================================================

class TestReflow:
    """Tests for page layout of translated text."""

    def test_page_count_never_below_original(self, monospace_font, a4_pages) -> None:
        """A three-page original keeps three pages for a one-word translation."""
        document = reflow(a4_pages(3), "Hi", monospace_font, SETTINGS)

        assert document.page_count == 3
        assert document.original_page_count == 3
        assert [page.source_index for page in document.pages] == [0, 1, 2]
        assert document.pages[0].lines[0].text == "Hi"
        # Pages the text never reached are blanked too
        assert document.pages[1].lines == ()
        assert document.pages[2].lines == ()

    def test_one_line_per_short_paragraph(self, monospace_font, a4_pages) -> None:
        text = "First paragraph\nSecond paragraph\nThird paragraph"

        document = reflow(a4_pages(1), text, monospace_font, SETTINGS)

        assert [line.text for line in document.pages[0].lines] == [
            "First paragraph",
            "Second paragraph",
            "Third paragraph",
        ]

    def test_first_line_starts_at_top_margin(self, monospace_font, a4_pages) -> None:
        document = reflow(a4_pages(1), "Hello", monospace_font, SETTINGS)
        line = document.pages[0].lines[0]
        assert line.x == pytest.approx(50.0)
        assert line.y == pytest.approx(842.0 - 50.0)

    def test_paragraph_spacing(self, monospace_font, a4_pages) -> None:
        """Lines advance one line height, paragraphs add 0.3 of a line."""
        document = reflow(a4_pages(1), "one two\nthree", monospace_font, SETTINGS)
        first, second = document.pages[0].lines
        assert first.y - second.y == pytest.approx(17.6 + 17.6 * 0.3)

    def test_blank_line_advances_half_a_line(self, monospace_font, a4_pages) -> None:
        document = reflow(a4_pages(1), "one\n\ntwo", monospace_font, SETTINGS)
        first, second = document.pages[0].lines
        assert first.y - second.y == pytest.approx(17.6 * (1 + 0.3 + 0.5))

    def test_no_line_drawn_below_bottom_margin(self, monospace_font, a4_pages) -> None:
        """Every line sits at or above margin + line height."""
        text = "\n".join(f"Paragraph {i}" for i in range(300))

        document = reflow(a4_pages(2), text, monospace_font, SETTINGS)

        for page in document.pages:
            for line in page.lines:
                assert line.y >= SETTINGS.margin + SETTINGS.line_height

    def test_blank_lines_do_not_break_pages_on_their_own(self, monospace_font, a4_pages) -> None:
        """Blank lines may push the cursor past the bottom margin; only text breaks."""
        # 31 lines leave the cursor at 792 - 31 * 22.88 = 82.72, above 67.6
        body = "\n".join(f"Line {i}" for i in range(31))

        trailing = reflow(a4_pages(1), body + "\n\n\n\n\n\n", monospace_font, SETTINGS)
        assert trailing.page_count == 1

        # Three blank lines move it to 56.32, so the next line opens a new page
        document = reflow(a4_pages(1), body + "\n\n\n\nAfter", monospace_font, SETTINGS)

        assert document.page_count == 2
        assert len(document.pages[0].lines) == 31
        assert [line.text for line in document.pages[1].lines] == ["After"]
        assert document.pages[1].lines[0].y == pytest.approx(842.0 - 50.0)

    def test_without_blank_lines_the_same_text_fits(self, monospace_font, a4_pages) -> None:
        body = "\n".join(f"Line {i}" for i in range(31))
        document = reflow(a4_pages(1), body + "\nAfter", monospace_font, SETTINGS)
        assert document.page_count == 1
        assert document.pages[0].lines[-1].y == pytest.approx(792.0 - 31 * 22.88)

    def test_single_page_original_grows_to_five_pages(self, monospace_font) -> None:
        """Overflow pages clone the first original page's size."""
        letter = PageGeometry(width=612.0, height=792.0)
        # 792 - 50 = 742; each paragraph line consumes 17.6 * 1.3 = 22.88,
        # the page breaks below 67.6, so 30 lines fit per page.
        text = "\n".join(f"Line {i}" for i in range(150))

        document = reflow([letter], text, monospace_font, SETTINGS)

        assert document.page_count == 5
        assert document.pages[0].source_index == 0
        assert all(page.is_appended for page in document.pages[1:])
        assert all(page.geometry == letter for page in document.pages)
        assert document.appended_page_count == 4
        assert [len(page.lines) for page in document.pages] == [30, 30, 30, 30, 30]
        assert document.line_count == 150

    def test_appended_pages_use_first_page_geometry(self, monospace_font) -> None:
        """With mixed sizes, extra pages copy page 1, not the last page."""
        pages = [PageGeometry(595.0, 842.0), PageGeometry(842.0, 595.0)]
        text = "\n".join(f"Line {i}" for i in range(200))

        document = reflow(pages, text, monospace_font, SETTINGS)

        assert document.pages[1].geometry == PageGeometry(842.0, 595.0)
        for page in document.pages[2:]:
            assert page.geometry == PageGeometry(595.0, 842.0)

    def test_reading_order_preserved_across_pages(self, monospace_font, a4_pages) -> None:
        paragraphs = [f"Item {i}" for i in range(120)]

        document = reflow(a4_pages(1), "\n".join(paragraphs), monospace_font, SETTINGS)

        drawn = [line.text for page in document.pages for line in page.lines]
        assert drawn == paragraphs

    def test_empty_original_rejected(self, monospace_font) -> None:
        with pytest.raises(ValueError):
            reflow([], "text", monospace_font, SETTINGS)

    def test_measures_with_real_font(self, font_bytes) -> None:
        """Works with PyMuPDF font metrics and non-Latin text."""
        font = fitz.Font(fontbuffer=font_bytes)
        document = reflow(
            [PageGeometry(595.0, 842.0)], "こんにちは 世界\nHello", font, SETTINGS
        )
        assert [line.text for line in document.pages[0].lines] == ["こんにちは 世界", "Hello"]
