#!/usr/bin/env python3
"""
SignBridge replay tool.
Feeds a recorded landmark session through the sign engine and the
hold-to-confirm debouncer, logging every confirmed sign.

Session format (JSON):
    {
        "width": 640, "height": 480, "fps": 30,
        "frames": [ [[x, y, z], ... 21 points], null, ... ]
    }
A null frame means no hand was visible.

Usage:
    signbridge-replay session.json
    signbridge-replay session.json --threshold 6.5 --log-level DEBUG
    signbridge-replay session.json --config my_config.yaml
"""

import sys
import json
import argparse
import logging

from signbridge import __version__
from signbridge.core.engine import SignEngine
from signbridge.modules.control.debouncer import SignDebouncer
from signbridge.modules.utils.config import Config
from signbridge.modules.utils.logger import setup_logging, SignLogger

logger = logging.getLogger(__name__)


def load_session(path: str) -> dict:
    """Read and sanity-check a recorded session.

    Raises:
        OSError: if the file cannot be read
        ValueError: if the content is not a valid session
    """
    with open(path, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("Session must be a JSON object")
    frames = data.get("frames")
    if not isinstance(frames, list):
        raise ValueError("Session has no 'frames' list")
    fps = data.get("fps", 30)
    if not isinstance(fps, (int, float)) or fps <= 0:
        raise ValueError(f"Invalid fps: {fps!r}")

    return {
        "width": data.get("width", 640),
        "height": data.get("height", 480),
        "fps": fps,
        "frames": frames,
    }


class ReplaySession:
    """Drives an engine with recorded frames the way a live host would."""

    def __init__(self, engine: SignEngine, debouncer: SignDebouncer,
                 sign_logger: SignLogger = None, score_threshold: float = None):
        self._engine = engine
        self._debouncer = debouncer
        self._sign_logger = sign_logger or SignLogger()
        self._score_threshold = score_threshold

    @property
    def sign_logger(self) -> SignLogger:
        return self._sign_logger

    def run(self, session: dict) -> list:
        """Replay all frames.

        Returns:
            Names of confirmed signs, in order
        """
        width, height, fps = session["width"], session["height"], session["fps"]
        confirmed = []

        for index, hand in enumerate(session["frames"]):
            now = index / fps

            if hand is None:
                self._engine.reset()
                self._debouncer.lost()
                continue

            detection = self._engine.detect_frame(hand, width, height, self._score_threshold)
            if detection is None:
                self._debouncer.lost()
                continue

            if self._debouncer.update(detection.name, now):
                self._engine.confirm_sign(detection.name, detection.confidence_percent / 10)
                self._sign_logger.log_sign(detection.name, detection.confidence_percent, now)
                confirmed.append(detection.name)

        logger.info("Replayed %d frames, %d signs confirmed",
                    len(session["frames"]), len(confirmed))
        return confirmed


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="SignBridge - replay a recorded landmark session"
    )
    parser.add_argument(
        "session", type=str,
        help="Path to a session JSON file"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--gestures", type=str, default=None,
        help="Path to gestures.yaml"
    )
    parser.add_argument(
        "--threshold", type=float, default=None,
        help="Minimum gesture bank score (0-10)"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # Load configuration
    config = Config()
    config.load(config_path=args.config, gestures_path=args.gestures)

    # Setup logging
    log_cfg = config.logging
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
        console_level=log_cfg.get("console_level"),
    )

    logger.info("=" * 60)
    logger.info("  SIGNBRIDGE REPLAY  v%s", __version__)
    logger.info("  Session: %s", args.session)
    logger.info("=" * 60)

    # to_dict() carries gestures_path for the default gesture bank
    engine = SignEngine(config.to_dict())
    if not engine.initialize():
        return 1

    try:
        session = load_session(args.session)
    except (OSError, ValueError) as e:
        logger.error("Cannot read session %s: %s", args.session, e)
        return 1

    replay = ReplaySession(
        engine,
        SignDebouncer(config.debouncing),
        score_threshold=args.threshold,
    )
    confirmed = replay.run(session)
    logger.info("Sentence: %s", " ".join(confirmed) or "(none)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
