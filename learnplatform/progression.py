# learnplatform/progression.py
import logging
import math

from .models import User

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 500


def level_for_xp(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def award_xp(user: User, amount: int) -> User:
    """Add xp and points; the level follows the xp total."""
    if not amount:
        return user
    user.xp += amount
    user.points += amount
    user.level = level_for_xp(user.xp)
    logger.info("Awarded %d xp to user %s (level %d)", amount, user.id, user.level)
    return user


def score_answers(questions, answers):
    """
    Grade answers positionally against ``questions``.

    Returns ``(correct_count, total, score)`` with ``score`` the percentage
    rounded half up. A quiz without questions scores 0.
    """
    total = len(questions)
    correct = sum(
        1 for idx, question in enumerate(questions)
        if idx < len(answers) and answers[idx] == question.correct_answer
    )
    score = math.floor(correct * 100 / total + 0.5) if total else 0
    return correct, total, score
