from services.text_diff import compute_word_diff, count_changes, normalize_whitespace


def _sides(chunks):
    original = "".join(c.value for c in chunks if c.type != "insert")
    suggested = "".join(c.value for c in chunks if c.type != "delete")
    return original, suggested


class TestEdgeCases:
    def test_both_empty(self):
        assert compute_word_diff("", "   ") == []

    def test_only_insert(self):
        [chunk] = compute_word_diff("", "Built APIs")
        assert (chunk.type, chunk.value) == ("insert", "Built APIs")

    def test_only_delete(self):
        [chunk] = compute_word_diff("Built APIs", "")
        assert (chunk.type, chunk.value) == ("delete", "Built APIs")

    def test_identical_after_whitespace_collapse(self):
        [chunk] = compute_word_diff("  Built   APIs \n", "Built APIs")
        assert (chunk.type, chunk.value) == ("equal", "Built APIs")


class TestDiff:
    def test_insertion_reconstructs_both_sides(self):
        chunks = compute_word_diff("Built APIs for billing", "Built REST APIs for billing")
        assert _sides(chunks) == ("Built APIs for billing", "Built REST APIs for billing")
        assert [c.type for c in chunks].count("insert") == 1
        assert "delete" not in [c.type for c in chunks]

    def test_replacement_deletes_before_inserts(self):
        chunks = compute_word_diff(
            "Worked on billing", "Maintained billing"
        )
        assert _sides(chunks) == ("Worked on billing", "Maintained billing")
        types = [c.type for c in chunks]
        assert types[0] == "delete"
        for current, following in zip(types, types[1:]):
            assert (current, following) != ("insert", "delete")
            assert current != following

    def test_completely_different(self):
        chunks = compute_word_diff("alpha beta", "gamma")
        assert _sides(chunks) == ("alpha beta", "gamma")
        assert "equal" not in [c.type for c in chunks]

    def test_normalize_whitespace(self):
        assert normalize_whitespace(" a \t b\n\nc ") == "a b c"


class TestCountChanges:
    def test_counts_words(self):
        chunks = compute_word_diff(
            "Worked on billing", "Maintained billing"
        )
        stats = count_changes(chunks)
        # "Worked on" removed, "Maintained" added
        assert stats.deletions == 2
        assert stats.insertions == 1

    def test_no_changes(self):
        stats = count_changes(compute_word_diff("same text", "same text"))
        assert (stats.insertions, stats.deletions) == (0, 0)
