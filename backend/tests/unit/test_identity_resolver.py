"""Unit tests for IdentityResolver.

Vendor resolution is an exact address match; solicitation resolution tries
the numeric subject tag first, then title substrings of `sent` records.
"""

import pytest

from rfpflow.errors import ResolutionMiss
from rfpflow.models import SolicitationStatus
from rfpflow.repositories import ProcurementRepository
from rfpflow.resolution import IdentityResolver, extract_solicitation_tag


@pytest.fixture
def resolver(db_session):
    return IdentityResolver(ProcurementRepository(db_session))


class TestSubjectTag:
    """Test numeric tag extraction from subjects."""

    @pytest.mark.parametrize("subject,expected", [
        ("Re: RFP #7", 7),
        ("RFP: 12 - Laptops", 12),
        ("rfp#3 quote", 3),
        ("Re: RFP 45", 45),
        ("RFP:#9", 9),
    ])
    def test_tag_variants(self, subject, expected):
        """Test tag formats with optional colon, whitespace and hash."""
        assert extract_solicitation_tag(subject) == expected

    @pytest.mark.parametrize("subject", ["", None, "Re: RFP: Laptops Q3", "Quote #7"])
    def test_no_tag(self, subject):
        """Test subjects without a numeric RFP tag."""
        assert extract_solicitation_tag(subject) is None


class TestVendorResolution:
    """Test sender address -> Vendor."""

    def test_exact_match(self, resolver, make_vendor):
        """Test a registered address resolves."""
        vendor = make_vendor("Acme", "v@x.com")
        assert resolver.resolve_vendor("v@x.com").id == vendor.id

    def test_surrounding_whitespace_trimmed(self, resolver, make_vendor):
        """Test whitespace around the address is ignored."""
        vendor = make_vendor("Acme", "v@x.com")
        assert resolver.resolve_vendor("  v@x.com \n").id == vendor.id

    def test_unknown_sender_misses(self, resolver, make_vendor):
        """Test an unregistered sender raises ResolutionMiss('vendor')."""
        make_vendor("Acme", "v@x.com")
        with pytest.raises(ResolutionMiss) as exc_info:
            resolver.resolve_vendor("other@x.com")
        assert exc_info.value.reason == "vendor"

    def test_empty_sender_misses(self, resolver):
        """Test an empty address never matches."""
        with pytest.raises(ResolutionMiss):
            resolver.resolve_vendor("")


class TestSolicitationResolution:
    """Test subject -> Solicitation."""

    def test_tag_wins_over_title_match(self, resolver, make_solicitation):
        """Test 'RFP #7' resolves id 7 even when another title matches."""
        make_solicitation("Laptops Q3", id=3)
        make_solicitation("Monitors", status=SolicitationStatus.DRAFT, id=7)

        solicitation = resolver.resolve_solicitation("Re: RFP #7 Laptops Q3")
        assert solicitation.id == 7

    @pytest.mark.parametrize("status", list(SolicitationStatus))
    def test_tag_resolves_any_status(self, resolver, make_solicitation, status):
        """Test the tag path ignores solicitation status."""
        make_solicitation("Anything", status=status, id=7)
        assert resolver.resolve_solicitation("RFP #7").id == 7

    def test_unknown_tag_misses(self, resolver, make_solicitation):
        """Test a tag for a missing id does not fall back to titles."""
        make_solicitation("Laptops Q3", id=1)
        with pytest.raises(ResolutionMiss):
            resolver.resolve_solicitation("RFP #99 Laptops Q3")

    def test_title_substring(self, resolver, make_solicitation):
        """Test a sent solicitation is matched by title substring."""
        solicitation = make_solicitation("Laptops Q3")
        assert resolver.resolve_solicitation("Re: RFP: Laptops Q3").id == solicitation.id

    def test_title_match_requires_sent(self, resolver, make_solicitation):
        """Test draft and closed solicitations are not title-matched."""
        make_solicitation("Laptops Q3", status=SolicitationStatus.DRAFT)
        make_solicitation("Laptops Q3", status=SolicitationStatus.CLOSED)
        with pytest.raises(ResolutionMiss) as exc_info:
            resolver.resolve_solicitation("Re: RFP: Laptops Q3")
        assert exc_info.value.reason == "solicitation"

    def test_title_match_is_case_sensitive(self, resolver, make_solicitation):
        """Test titles match as literal substrings."""
        make_solicitation("Laptops Q3")
        with pytest.raises(ResolutionMiss):
            resolver.resolve_solicitation("re: rfp: laptops q3")

    def test_longest_title_wins(self, resolver, make_solicitation):
        """Test overlapping titles resolve to the longest match."""
        make_solicitation("Laptops")
        refresh = make_solicitation("Laptops Q3 Refresh")
        make_solicitation("Q3")

        assert resolver.resolve_solicitation("Re: Laptops Q3 Refresh quote").id == refresh.id

    def test_equal_length_tie_goes_to_newest(self, resolver, make_solicitation):
        """Test equal-length matches resolve to the highest id."""
        make_solicitation("Desks")
        newer = make_solicitation("Desks")
        assert resolver.resolve_solicitation("Re: Desks").id == newer.id

    def test_no_match_misses(self, resolver, make_solicitation):
        """Test an unrelated subject raises ResolutionMiss."""
        make_solicitation("Laptops Q3")
        with pytest.raises(ResolutionMiss):
            resolver.resolve_solicitation("Lunch on Friday?")
