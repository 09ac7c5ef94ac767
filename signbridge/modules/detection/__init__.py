"""Hand landmark validation and geometry helpers."""
from .landmark_extractor import as_hand, to_pixel_coords, finger_states, hand_scale

__all__ = ["as_hand", "to_pixel_coords", "finger_states", "hand_scale"]
