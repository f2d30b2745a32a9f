"""
Tests for multi-phrase classification search.
"""

from xtract.search import PatternSearcher, relax_string


def collect(searcher, text):
    hits = []
    searcher.search(text, lambda prepared, pattern, offset: hits.append((pattern, offset)) is None)
    return hits


class TestRelaxString:
    """Test punctuation relaxation."""

    def test_relax(self):
        """Test punctuation runs become single spaces."""
        assert relax_string("Breast-Cancer,  (early)") == "Breast Cancer early"
        assert relax_string("...") == ""


class TestPatternSearcher:
    """Test whole-word phrase search."""

    def test_overlapping_matches(self):
        """Test matches ending together are reported by start position."""
        searcher = PatternSearcher(["breast cancer", "cancer"])
        hits = collect(searcher, "Early Breast-Cancer detection")
        assert [pattern for pattern, _ in hits] == ["breast cancer", "cancer"]
        assert hits[0][1] < hits[1][1]

    def test_end_order(self):
        """Test matches are reported in order of their end position."""
        searcher = PatternSearcher(["detection", "early"])
        hits = collect(searcher, "early detection")
        assert [pattern for pattern, _ in hits] == ["early", "detection"]

    def test_whole_words_only(self):
        """Test a pattern inside a longer word does not match."""
        assert collect(PatternSearcher(["can"]), "cancer") == []
        assert collect(PatternSearcher(["can"], whole_word=False), "cancer") == [("can", 0)]

    def test_case_sensitivity(self):
        """Test case folding can be turned off."""
        assert collect(PatternSearcher(["DNA"]), "dna repair") != []
        assert collect(PatternSearcher(["DNA"], case_sensitive=True), "dna repair") == []

    def test_repeated_occurrences(self):
        """Test every occurrence is reported."""
        hits = collect(PatternSearcher(["gene"]), "gene to gene")
        assert len(hits) == 2

    def test_callback_stops_search(self):
        """Test returning False from the callback ends the search."""
        seen = []

        def first_only(prepared, pattern, offset):
            seen.append(pattern)
            return False

        PatternSearcher(["a", "b"]).search("a b", first_only)
        assert seen == ["a"]

    def test_len_and_blank_patterns(self):
        """Test blank patterns are ignored and duplicates counted."""
        searcher = PatternSearcher(["a b", "A-B", "", "..."])
        assert len(searcher) == 2
        hits = collect(searcher, "a b")
        assert [pattern for pattern, _ in hits] == ["a b", "A-B"]

    def test_empty_text(self):
        """Test nothing is reported for empty text."""
        assert collect(PatternSearcher(["a"]), "") == []
