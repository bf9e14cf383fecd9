"""Seeding, score arithmetic, logging."""

import logging
import math
import random
import sys

import numpy as np


def seed_everything(seed: int = 42) -> None:
    random.seed(seed)
    np.random.seed(seed)


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3). Scores are never negative."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, round_half_up(value)))


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger("recovery_match")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s %(levelname)s] %(message)s", datefmt="%H:%M:%S")
        )
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
