from __future__ import annotations


class ConfigError(ValueError):
    """Raised when a crawler configuration cannot be resolved."""


class ActionLayoutError(ValueError):
    """Raised when an action vector does not match the crawler action layout."""


class RewardComputationError(ValueError):
    """Raised when a reward term evaluates to NaN.

    A NaN reward means the physics snapshot is malformed. The step is aborted
    instead of feeding a corrupted value to the learner.
    """

    def __init__(self, term: str, **context) -> None:
        self.term = term
        self.context = dict(context)
        details = "".join(f"\n {key}: {value}" for key, value in self.context.items())
        super().__init__(f"NaN in {term}.{details}")
