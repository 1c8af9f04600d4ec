"""Domain errors raised by the scheduler and the study service."""


class InvalidStateError(ValueError):
    """A card state holds a value outside NEW, LEARNING, REVIEW and SUSPENDED.

    This is a data-integrity bug, never a user error.
    """

    def __init__(self, state: object):
        self.state = state
        super().__init__(f"Unknown card state: {state!r}")


class InvalidRatingError(ValueError):
    """A rating string does not name a ReviewRating."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Unknown review rating: {rating!r}")


class CardStateNotFoundError(LookupError):
    """No stored learning state for the (card, user) pair."""

    def __init__(self, card_id: str, user_id: str, detail: str = "Card state not found"):
        self.card_id = card_id
        self.user_id = user_id
        super().__init__(f"{detail}: card={card_id} user={user_id}")
