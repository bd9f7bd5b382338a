"""
Random state helpers so feed shuffling can be made reproducible in tests.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


def get_random_state(seed: Optional[int] = None) -> np.random.RandomState:
    """
    Get a random state for feed shuffling and discover sampling.

    Args:
        seed: Seed for the random state. None draws fresh OS entropy, which is
            what production wants (every refresh should look different).

    Returns:
        numpy.random.RandomState
    """
    if seed is not None:
        logger.debug(f"Using seeded random state ({seed})")
    return np.random.RandomState(seed)


class ReproducibleContext:
    """
    Context manager handing out a seeded random state and restoring numpy's
    global state afterwards.

    Example:
        with ReproducibleContext(123) as rng:
            shuffle_feed(movies, rng=rng)
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._saved_state = None

    def __enter__(self) -> np.random.RandomState:
        self._saved_state = np.random.get_state()
        np.random.seed(self.seed)
        return get_random_state(self.seed)

    def __exit__(self, exc_type, exc_val, exc_tb):
        np.random.set_state(self._saved_state)
