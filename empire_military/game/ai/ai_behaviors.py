"""AI Difficulty Strategy Classes

This module implements the Strategy design pattern for AI difficulty.
Each behavior adjusts the raw heuristic scores computed by the military AI
and picks among ranked candidates; the heuristics themselves are shared.
"""

from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

import numpy as np

from ...core.game_enums import Difficulty
from ...core.game_info import DIFFICULTY_DATA, DifficultySettings

T = TypeVar("T")


class AIBehavior(ABC):
    """Abstract base class for difficulty strategies."""

    def __init__(self, rng: np.random.Generator):
        self.rng = rng
        self.settings: DifficultySettings = DIFFICULTY_DATA[self.difficulty]

    @property
    @abstractmethod
    def difficulty(self) -> Difficulty:
        """Difficulty level this behavior implements."""

    def adjust_attack_score(self, score: float, strategic_value: float) -> float:
        return score

    def adjust_card_score(self, score: float, counters_opponent: bool, terrain_match: bool) -> float:
        return score

    def adjust_training_score(self, score: float, strength: int, resource_synergy: bool) -> float:
        return score

    def choose(self, ranked: Sequence[T]) -> T:
        """Pick from candidates sorted best first."""
        return ranked[0]

    def get_behavior_name(self) -> str:
        return self.difficulty.value.capitalize()


class NormalBehavior(AIBehavior):
    """Plays the raw heuristic scores straight."""

    @property
    def difficulty(self) -> Difficulty:
        return Difficulty.NORMAL


class EasyBehavior(AIBehavior):
    """Noisy scores and an occasional runner-up pick."""

    @property
    def difficulty(self) -> Difficulty:
        return Difficulty.EASY

    def _noise(self) -> float:
        return float(self.rng.uniform(self.settings.noise_min, self.settings.noise_max))

    def adjust_attack_score(self, score: float, strategic_value: float) -> float:
        return score * self.settings.attack_score_factor * self._noise()

    def adjust_card_score(self, score: float, counters_opponent: bool, terrain_match: bool) -> float:
        return score * self._noise()

    def adjust_training_score(self, score: float, strength: int, resource_synergy: bool) -> float:
        return score * self._noise()

    def choose(self, ranked: Sequence[T]) -> T:
        if len(ranked) > 1 and self.rng.random() < self.settings.second_choice_chance:
            return ranked[1]
        return ranked[0]


class HardBehavior(AIBehavior):
    """Extra weight on counters, terrain, strength and strategic targets."""

    @property
    def difficulty(self) -> Difficulty:
        return Difficulty.HARD

    def adjust_attack_score(self, score: float, strategic_value: float) -> float:
        score *= self.settings.attack_score_factor
        if strategic_value > self.settings.high_value_threshold:
            score += self.settings.high_value_bonus
        return score

    def adjust_card_score(self, score: float, counters_opponent: bool, terrain_match: bool) -> float:
        if counters_opponent:
            score += self.settings.counter_bonus
        if terrain_match:
            score += self.settings.terrain_bonus
        return score

    def adjust_training_score(self, score: float, strength: int, resource_synergy: bool) -> float:
        score += strength * self.settings.strength_factor
        if resource_synergy:
            score += self.settings.resource_bonus
        return score


def create_ai_behavior(difficulty: Difficulty, rng: np.random.Generator) -> AIBehavior:
    """Factory function to create difficulty behaviors.

    Raises:
        ValueError: If the difficulty is not supported
    """
    if difficulty == Difficulty.EASY:
        return EasyBehavior(rng)
    elif difficulty == Difficulty.NORMAL:
        return NormalBehavior(rng)
    elif difficulty == Difficulty.HARD:
        return HardBehavior(rng)
    else:
        raise ValueError(f"Unsupported difficulty: {difficulty}")
