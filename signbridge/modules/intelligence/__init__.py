"""Per-session adaptation."""
from .online_learner import OnlineLearner

__all__ = ["OnlineLearner"]
