# src/runner/scoreboard.py
from __future__ import annotations
import logging
from .config import START_LIVES

logger = logging.getLogger(__name__)


class Scoreboard:
    """
    Score and lives of one run.
    apply_life_cost() refuses (returns False, changes nothing) when the cost
    would leave the actor with no lives; the caller ends the run.
    """
    def __init__(self, lives: int = START_LIVES, best_score: int = 0):
        if lives < 1:
            raise ValueError(f"a run starts with at least one life, got {lives!r}")
        self.score = 0
        self.lives = int(lives)
        self.best_score = max(0, int(best_score))
        self.is_new_best = False

    def add_score(self, amount: int) -> None:
        self.score += int(amount)
        if self.score > self.best_score:
            self.best_score = self.score
            self.is_new_best = True

    def apply_life_cost(self, amount: int) -> bool:
        amount = abs(int(amount))
        if self.lives - amount <= 0:
            return False
        self.lives -= amount
        logger.debug("Lost %d life, %d left", amount, self.lives)
        return True

    def add_life(self, amount: int) -> None:
        self.lives = max(0, self.lives + int(amount))
