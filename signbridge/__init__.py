"""
SignBridge Fusion Core
======================

Turns a per-frame stream of 21 hand landmarks into a stable sign label
with a confidence score.

Modules:
    - core: Shared types and the SignEngine orchestrator
    - detection: Landmark validation and geometry helpers
    - recognition: Gesture bank, geometric classifier, conflict resolver,
      temporal smoother
    - intelligence: Per-session online confidence learner
    - control: Hold-to-confirm sign debouncer
    - utils: Configuration and logging
"""

__version__ = "1.0.0"
__author__ = "SignBridge Team"
