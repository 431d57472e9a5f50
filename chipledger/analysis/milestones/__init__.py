"""Package des faits marquants d'avant-soirée."""

from .engine import evaluate_rules, generate_milestones, mentioned_players, select_milestones
from .rules import MILESTONE_RULES, MilestoneContext, get_rule

__all__ = [
    "MILESTONE_RULES",
    "MilestoneContext",
    "evaluate_rules",
    "generate_milestones",
    "get_rule",
    "mentioned_players",
    "select_milestones",
]
