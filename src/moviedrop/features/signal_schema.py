from enum import Enum


class SignalAction(str, Enum):
    """What the user did with a card"""
    LIKE = "like"
    DISMISS = "dismiss"
    WATCHLIST = "watchlist"


# Actions that mean "do not recommend this again"
REJECTING_OR_CONSUMED = (SignalAction.LIKE, SignalAction.DISMISS)
