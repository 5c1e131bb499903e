"""AI system components.

This package contains the military AI and its difficulty behaviors:
- ai_controller.py: Attack targeting, card choice, unit training and full AI turns
- ai_behaviors.py: Difficulty strategies adjusting scores and picks
"""

from .ai_controller import AITurnResult, AttackPlan, MilitaryAI
from .ai_behaviors import AIBehavior, EasyBehavior, HardBehavior, NormalBehavior, create_ai_behavior

__all__ = [
    "AITurnResult",
    "AttackPlan",
    "MilitaryAI",
    "AIBehavior",
    "EasyBehavior",
    "HardBehavior",
    "NormalBehavior",
    "create_ai_behavior",
]
