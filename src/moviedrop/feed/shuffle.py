"""
Shuffle Stage - randomized feed order with a lead-card tie-break.
"""

from typing import List, Optional, Sequence

import numpy as np

from moviedrop.features.movie_schema import Movie


def shuffle_feed(movies: Sequence[Movie],
                 previous_first_id: Optional[int] = None,
                 rng: Optional[np.random.RandomState] = None) -> List[Movie]:
    """
    Fisher-Yates shuffle of a copy of `movies`.

    Walks from the last index down to 1, swapping each position with a
    uniformly chosen index in [0, i]. If the new lead card is the same movie
    that led the previous feed, positions 0 and 1 are swapped so consecutive
    refreshes do not open on the same card.
    """
    rng = rng or np.random.RandomState()
    result = list(movies)

    for i in range(len(result) - 1, 0, -1):
        j = int(rng.randint(0, i + 1))
        result[i], result[j] = result[j], result[i]

    if len(result) > 1 and previous_first_id is not None and result[0].id == previous_first_id:
        result[0], result[1] = result[1], result[0]

    return result
