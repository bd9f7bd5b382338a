"""
Page Sampler - spreads repeated feed requests across upstream pages.

The hash is not cryptographic; it only has to scatter salts over the
page range so consecutive refreshes rarely land on the same page.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

logger = logging.getLogger(__name__)

MAX_SAMPLED_PAGE = 500
DISCOVER_PAGE_SPAN = 50
_HASH_MASK = 0xFFFFFFFF
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def _code_units(salt: str):
    """UTF-16 code units, so non-BMP characters hash like the mobile client does."""
    data = salt.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def page_for_salt(salt: str) -> int:
    """
    Deterministically map a salt to a page in [1, 500].

    hash = (hash * 31 + code) mod 2**32 over the salt, page = hash % 500 + 1.
    An empty salt gives page 1.
    """
    h = 0
    for code in _code_units(salt or ""):
        h = (h * 31 + code) & _HASH_MASK
    return (h % MAX_SAMPLED_PAGE) + 1


def make_salt(t: Optional[str] = None, r: Optional[str] = None, now_ms: Optional[int] = None) -> str:
    """
    Build a request salt from a client timestamp, client randomness and wall-clock time.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{t or ''}-{r or ''}-{now_ms}"


@dataclass
class FeedRequest:
    """Ephemeral description of one feed fetch. Never persisted."""
    randomize: bool = False
    salt: Optional[str] = None
    exclude_ids: List[int] = field(default_factory=list)
    page: Optional[int] = None
    region: str = "US"


def resolve_page(request: FeedRequest) -> int:
    """
    Upstream page for a request.

    Randomized requests hash their salt (a fresh one when absent); otherwise
    the explicit page is used, clamped to the sampled range.
    """
    if request.randomize:
        salt = request.salt if request.salt is not None else make_salt()
        page = page_for_salt(salt)
        logger.debug(f"Sampled page {page} for salt '{salt}'")
        return page
    if request.page is None:
        return 1
    return max(1, min(int(request.page), MAX_SAMPLED_PAGE))


def parse_leading_int(value) -> Optional[int]:
    """Integer prefix of a query value: "12abc" -> 12, "3.7" -> 3, "abc" -> None."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def seeded_discover_page(seed: Optional[str] = None, rng: Optional[np.random.RandomState] = None) -> int:
    """
    Page in [1, 50] for the discover sampler.

    A seed pins the page through its integer prefix ("12abc" -> 12); seeds
    without one count as 0. Without a seed a random page is drawn.
    """
    if seed is not None and str(seed) != "":
        seed_num = parse_leading_int(seed) or 0
        return 1 + (abs(seed_num) % DISCOVER_PAGE_SPAN)
    rng = rng or np.random.RandomState()
    return 1 + int(rng.randint(0, DISCOVER_PAGE_SPAN))
