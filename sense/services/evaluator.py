"""
Guess Evaluator

Classifies a free-text guess against the day's answer, synonyms and category.

Evaluation is an ordered cascade of independent rules. Each rule inspects an
``EvaluationContext`` and either returns a ``GuessResult`` or ``None``; the
first rule that returns a result wins. The cheap, explainable checks (exact,
synonym, category, substring) run before the edit-distance comparison.
"""

from functools import cached_property
from typing import Callable, Optional, Sequence, Tuple

from ..config.game_settings import (
    SYNONYM_SIMILARITY, CATEGORY_SIMILARITY, SUBSTRING_SIMILARITY, CATEGORY_TOKEN_SIMILARITY,
    STRONG_FUZZY_THRESHOLD, WEAK_FUZZY_THRESHOLD
)
from ..models.game import FeedbackTier, MatchKind, GuessResult
from ..utils.text import normalize, tokenize, similarity


class EvaluationContext:
    """Normalized inputs shared by every rule of one evaluation."""

    def __init__(self, guess: str, answer: str, synonyms: Sequence[str], category: str):
        self.raw_guess = guess
        self.guess = normalize(guess)
        self.answer = normalize(answer)
        self.synonyms = [normalize(s) for s in synonyms or ()]
        self.category = normalize(category)

    @cached_property
    def best_similarity(self) -> float:
        """Highest similarity of the guess to the answer or any synonym."""
        scores = [similarity(self.guess, self.answer)]
        scores.extend(similarity(self.guess, synonym) for synonym in self.synonyms)
        return max(scores)

    def result(self, tier: FeedbackTier, kind: MatchKind, score: float, explanation: str) -> GuessResult:
        return GuessResult(
            guess=self.raw_guess,
            tier=tier.value,
            match_kind=kind.value,
            similarity=score,
            explanation=explanation
        )


Rule = Callable[[EvaluationContext], Optional[GuessResult]]


def _empty_guess(ctx: EvaluationContext) -> Optional[GuessResult]:
    if not ctx.guess:
        return ctx.result(FeedbackTier.NEUTRAL, MatchKind.NONE, 0.0, "Enter a guess to get feedback.")
    return None


def _exact_answer(ctx: EvaluationContext) -> Optional[GuessResult]:
    if ctx.guess == ctx.answer:
        return ctx.result(FeedbackTier.CORRECT, MatchKind.EXACT, 1.0, "Spot on! That's today's sense.")
    return None


def _synonym(ctx: EvaluationContext) -> Optional[GuessResult]:
    if ctx.guess in ctx.synonyms:
        return ctx.result(
            FeedbackTier.CLOSE, MatchKind.SYNONYM, SYNONYM_SIMILARITY,
            "So close! That means nearly the same thing as the answer."
        )
    return None


def _category_mention(ctx: EvaluationContext) -> Optional[GuessResult]:
    # Guess contains the category word, not the other way round.
    if ctx.category and ctx.category in ctx.guess:
        return ctx.result(
            FeedbackTier.CLOSE, MatchKind.CATEGORY, CATEGORY_SIMILARITY,
            f"Right sense! Today's answer is all about {ctx.category}."
        )
    return None


def _substring(ctx: EvaluationContext) -> Optional[GuessResult]:
    if ctx.guess in ctx.answer or ctx.answer in ctx.guess:
        return ctx.result(
            FeedbackTier.CLOSE, MatchKind.SUBSTRING, SUBSTRING_SIMILARITY,
            "Close! Your guess overlaps with the answer."
        )
    return None


def _fuzzy(ctx: EvaluationContext) -> Optional[GuessResult]:
    best = ctx.best_similarity
    percent = round(best * 100)

    if best >= STRONG_FUZZY_THRESHOLD:
        return ctx.result(FeedbackTier.CLOSE, MatchKind.FUZZY, best, f"Very close! {percent}% similar.")
    if best >= WEAK_FUZZY_THRESHOLD:
        return ctx.result(FeedbackTier.CLOSE, MatchKind.FUZZY, best, f"Good progress: {percent}% similar.")
    return None


def _category_token(ctx: EvaluationContext) -> Optional[GuessResult]:
    if any(token in ctx.guess for token in tokenize(ctx.category)):
        return ctx.result(
            FeedbackTier.CLOSE, MatchKind.CATEGORY, CATEGORY_TOKEN_SIMILARITY,
            "You're circling the right sense."
        )
    return None


RULES: Tuple[Rule, ...] = (
    _empty_guess,
    _exact_answer,
    _synonym,
    _category_mention,
    _substring,
    _fuzzy,
    _category_token,
)


def evaluate(guess: str, answer: str, synonyms: Sequence[str], category: str) -> GuessResult:
    """
    Score a guess against the answer record.

    Args:
        guess: Guess text as submitted (trimmed by the caller)
        answer: Canonical answer
        synonyms: Accepted near-synonyms of the answer
        category: Sensory category of the answer

    Returns:
        GuessResult: Tier, match kind, similarity and explanation
    """
    ctx = EvaluationContext(guess, answer, synonyms, category)

    for rule in RULES:
        result = rule(ctx)
        if result is not None:
            return result

    return ctx.result(
        FeedbackTier.NEUTRAL, MatchKind.NONE, ctx.best_similarity,
        "No strong connection. Try a different angle."
    )
