"""Password strength scoring, independent of any hashing algorithm."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

COMMON_PASSWORDS: FrozenSet[str] = frozenset(
    {
        "password",
        "123456",
        "qwerty",
        "admin",
        "welcome",
        "password123",
        "12345678",
        "123456789",
        "letmein",
        "iloveyou",
        "abc123",
        "111111",
        "monkey",
        "dragon",
    }
)

# Classic length, class and penalty weights scaled by four.
MIN_LENGTH = 8
LENGTH_POINTS_PER_CHAR = 2
LENGTH_POINTS_CAP = 40

CLASS_BONUSES = (
    (re.compile(r"[a-z]"), 20),
    (re.compile(r"[A-Z]"), 20),
    (re.compile(r"[0-9]"), 20),
    (re.compile(r"[^a-zA-Z0-9]"), 28),
)

REPEATED_PENALTY = 12
DIGITS_ONLY_PENALTY = 20
LETTERS_ONLY_PENALTY = 12
DICTIONARY_WORD_PENALTY = 20

_REPEATED_RUN = re.compile(r"(.)\1{2,}")
_DIGITS_ONLY = re.compile(r"^[0-9]+$")
_LETTERS_ONLY = re.compile(r"^[a-zA-Z]+$")

RATINGS = ((20, "Very Weak"), (40, "Weak"), (60, "Moderate"), (80, "Strong"))
TOP_RATING = "Very Strong"


@dataclass(frozen=True)
class StrengthReport:
    score: int
    rating: str
    feedback: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"score": self.score, "rating": self.rating, "feedback": list(self.feedback)}


def rating_for(score: int) -> str:
    for threshold, label in RATINGS:
        if score < threshold:
            return label
    return TOP_RATING


class PasswordStrengthEvaluator:
    def __init__(self, denylist: Optional[FrozenSet[str]] = None) -> None:
        self._denylist = frozenset(word.lower() for word in (denylist or COMMON_PASSWORDS))

    def evaluate(self, password: Optional[str]) -> StrengthReport:
        if not password:
            return StrengthReport(score=0, rating=rating_for(0), feedback=["No password provided"])

        score = 0
        feedback: List[str] = []

        if len(password) < MIN_LENGTH:
            feedback.append("Password is too short")
        else:
            score += min(len(password) * LENGTH_POINTS_PER_CHAR, LENGTH_POINTS_CAP)

        for pattern, bonus in CLASS_BONUSES:
            if pattern.search(password):
                score += bonus

        if _REPEATED_RUN.search(password):
            score -= REPEATED_PENALTY
            feedback.append("Avoid repeated characters")
        if _DIGITS_ONLY.match(password):
            score -= DIGITS_ONLY_PENALTY
            feedback.append("Don't use only numbers")
        if _LETTERS_ONLY.match(password):
            score -= LETTERS_ONLY_PENALTY
            feedback.append("Mix letters and numbers/symbols")

        if password.lower() in self._denylist:
            score = 0
            feedback.append("This is a very common password")

        if len(password) <= 10 and _LETTERS_ONLY.match(password):
            score -= DICTIONARY_WORD_PENALTY
            feedback.append("Avoid using single dictionary words")

        score = max(0, min(100, score))
        return StrengthReport(
            score=score,
            rating=rating_for(score),
            feedback=feedback or ["Good password!"],
        )


def evaluate_password_strength(password: Optional[str]) -> StrengthReport:
    return PasswordStrengthEvaluator().evaluate(password)
