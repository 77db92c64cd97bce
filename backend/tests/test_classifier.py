"""Tests for response source classification."""

from services.classifier import classify_response, match_reference_title
from services.types import Language, SourceKind

TITLES = ["Biology Grade 12.pdf", "Chemistry.pdf"]


class TestMatchReferenceTitle:
    """Tests for match_reference_title."""

    def test_case_insensitive_extension_stripped(self):
        """Test the stem matches regardless of case and extension."""
        answer = "For more, see biology grade 12 for details."
        assert match_reference_title(answer, TITLES) == "Biology Grade 12.pdf"

    def test_first_title_in_list_order_wins(self):
        """Test list order decides when several titles match."""
        answer = "Both CHEMISTRY and Biology Grade 12 cover this."
        assert match_reference_title(answer, TITLES) == "Biology Grade 12.pdf"
        assert match_reference_title(answer, list(reversed(TITLES))) == "Chemistry.pdf"

    def test_no_match(self):
        """Test no title is reported when none is mentioned."""
        assert match_reference_title("Photosynthesis happens in leaves.", TITLES) is None

    def test_empty_stems_are_skipped(self):
        """Test a title with an empty stem never matches everything."""
        assert match_reference_title("anything", [".pdf", ""]) is None

    def test_arabic_titles(self):
        """Test non-Latin titles match by substring."""
        answer = "راجع كتاب الأحياء للصف الثاني عشر"
        assert match_reference_title(answer, ["الأحياء.pdf"]) == "الأحياء.pdf"


class TestClassifyResponse:
    """Tests for classify_response."""

    def test_match_is_textbook(self):
        """Test a matched title classifies as textbook even with web allowed."""
        result = classify_response("see Chemistry chapter 2", TITLES, True, Language.EN)

        assert result.source_kind is SourceKind.TEXTBOOK
        assert result.source_title == "Chemistry.pdf"
        assert result.answer == "see Chemistry chapter 2"

    def test_no_match_with_web_search_is_web(self):
        """Test an unmatched answer with expanded search is web."""
        result = classify_response("General knowledge.", TITLES, True, Language.EN)

        assert result.source_kind is SourceKind.WEB
        assert result.source_title is None

    def test_no_match_without_web_search_is_textbook(self):
        """Test the default fallback is textbook."""
        result = classify_response("General knowledge.", TITLES, False, Language.AR)

        assert result.source_kind is SourceKind.TEXTBOOK
        assert result.source_title is None
        assert result.language is Language.AR
