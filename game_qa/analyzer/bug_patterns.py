"""
Bug Patterns
============
Known defect signatures for generated paddle/ball sensor games.

Each entry pairs a detection regex with the guard substrings that make the
signature harmless. The table is data: add a BugPattern here to extend the
scan, no new branches needed.

    ball pinned to paddle   — ball position copied from the paddle every
                              frame outside a "not started" guard (critical)
    incomplete collision    — vertical velocity flipped without a direction
                              guard, so the ball can stick inside the paddle
    runs after game over    — gameOver set but the loop never returns early
                              (critical)
"""
import re
from typing import List, Sequence

from game_qa.models.bug_pattern import BugPattern


BALL_PINNED_TO_PADDLE = BugPattern(
    name="ball stuck to paddle",
    detection=re.compile(r"ball\.x\s*=\s*paddle\.x.*\n[\s\S]*?ball\.y\s*=\s*paddle\.y"),
    protection=("!gameStarted", "!game.started"),
    critical=True,
)

INCOMPLETE_COLLISION = BugPattern(
    name="incomplete collision handling",
    detection=re.compile(r"ball\.dy\s*\*=\s*-1"),
    protection=("ball.dy > 0", "dy > 0"),
    critical=False,
)

RUNS_AFTER_GAME_OVER = BugPattern(
    name="game keeps running after game over",
    detection=re.compile(r"gameOver\s*=\s*true"),
    protection=("if (gameOver) return", "if(gameOver)return"),
    critical=True,
)

DEFAULT_BUG_PATTERNS: tuple[BugPattern, ...] = (
    BALL_PINNED_TO_PADDLE,
    INCOMPLETE_COLLISION,
    RUNS_AFTER_GAME_OVER,
)


def scan_bug_patterns(
    text: str,
    patterns: Sequence[BugPattern] = DEFAULT_BUG_PATTERNS,
) -> List[BugPattern]:
    """Return the patterns present in ``text`` without their protection, in table order."""
    return [pattern for pattern in patterns if pattern.found_in(text)]
