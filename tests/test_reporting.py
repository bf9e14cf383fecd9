"""Tests for console table formatting."""

from recovery_match.ranking.ranker import rank_candidates
from recovery_match.reporting.tables import (
    format_breakdown_table,
    format_flags,
    format_ranking_table,
    format_summary,
)
from recovery_match.scoring.engine import calculate_compatibility


class TestTables:
    def test_breakdown_table(self, make_profile):
        result = calculate_compatibility(make_profile("a"), make_profile("b"))
        table = format_breakdown_table(result)
        for name in ("Location", "Budget", "Recovery", "Extended", "Overall"):
            assert name in table
        assert str(result.overall_score) in table

    def test_flags(self, make_profile):
        result = calculate_compatibility(make_profile("a"), make_profile("b", smoking_status="regular"))
        text = format_flags(result)
        assert "[+] Perfect location match" in text
        assert "[-] Non-smoker matched with regular smoker" in text

    def test_summary(self, make_profile):
        text = format_summary(calculate_compatibility(make_profile("a"), make_profile("b")))
        assert text.startswith("a x b:")
        assert "Next steps:" in text
        assert "[+] location: You have compatible location preferences" in text

    def test_ranking_table(self, make_profile):
        subject = make_profile("me")
        matches = rank_candidates(subject, [make_profile("c1"), make_profile("c2", primary_city="Houston")])
        table = format_ranking_table(matches, tablefmt="plain")
        lines = table.splitlines()
        assert len(lines) == 3
        assert "c1" in lines[1]
        assert "c2" in lines[2]
