"""
Unit tests for the page sampler: salt hashing, request page resolution and
the seeded discover page.
"""
import pytest

from moviedrop.feed.sampler import (
    FeedRequest,
    make_salt,
    page_for_salt,
    parse_leading_int,
    resolve_page,
    seeded_discover_page,
)
from moviedrop.utils.reproducibility import get_random_state


def test_empty_salt_gives_page_one():
    assert page_for_salt("") == 1


def test_known_salts():
    # 'a' -> 97 -> 98, 'ab' -> 97*31 + 98 = 3105 -> 106
    assert page_for_salt("a") == 98
    assert page_for_salt("ab") == 106


@pytest.mark.parametrize("salt", ["x", "1700000000000-42-1700000000123", "é-ü-漢字", "🎬" * 40, "z" * 5000])
def test_page_in_range_and_deterministic(salt):
    page = page_for_salt(salt)
    assert 1 <= page <= 500
    assert page_for_salt(salt) == page


def test_hash_wraps_at_32_bits():
    """Long salts overflow 2**32 many times; the result must still be a valid page."""
    h = 0
    salt = "moviedrop" * 200
    for ch in salt:
        h = (h * 31 + ord(ch)) % (2 ** 32)
    assert page_for_salt(salt) == h % 500 + 1


def test_make_salt_shape():
    assert make_salt("t1", "r9", now_ms=123) == "t1-r9-123"
    assert make_salt(now_ms=5) == "--5"


class TestResolvePage:

    def test_randomized_uses_salt(self):
        request = FeedRequest(randomize=True, salt="ab")
        assert resolve_page(request) == 106

    def test_randomized_without_salt_still_valid(self):
        assert 1 <= resolve_page(FeedRequest(randomize=True)) <= 500

    def test_explicit_page_clamped(self):
        assert resolve_page(FeedRequest(page=7)) == 7
        assert resolve_page(FeedRequest(page=0)) == 1
        assert resolve_page(FeedRequest(page=9999)) == 500

    def test_default_page_is_one(self):
        assert resolve_page(FeedRequest()) == 1


class TestSeededDiscoverPage:

    def test_seed_pins_page(self):
        assert seeded_discover_page("0") == 1
        assert seeded_discover_page("49") == 50
        assert seeded_discover_page("50") == 1
        assert seeded_discover_page("-3") == 4

    def test_non_numeric_seed_counts_as_zero(self):
        assert seeded_discover_page("abc") == 1
        assert seeded_discover_page("\u00b2") == 1

    @pytest.mark.parametrize("seed, page", [("12abc", 13), ("3.7", 4), (" +7", 8), ("-60x", 11)])
    def test_seed_integer_prefix_is_used(self, seed, page):
        assert seeded_discover_page(seed) == page

    def test_random_page_without_seed(self):
        rng = get_random_state(3)
        pages = {seeded_discover_page(None, rng=rng) for _ in range(200)}
        assert pages <= set(range(1, 51))
        assert len(pages) > 10


@pytest.mark.parametrize("raw, expected", [
    ("12", 12),
    ("12abc", 12),
    ("3.7", 3),
    ("  -4", -4),
    ("+9z", 9),
    ("abc", None),
    ("", None),
    ("--5", None),
    (None, None),
])
def test_parse_leading_int(raw, expected):
    assert parse_leading_int(raw) == expected
