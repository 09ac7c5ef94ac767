"""Host-side sign confirmation."""
from .debouncer import SignDebouncer

__all__ = ["SignDebouncer"]
