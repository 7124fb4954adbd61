"""Score normalization shared by the emotion providers."""
import math
from collections.abc import Mapping

from petspace.emotion.errors import NoSignalError
from petspace.emotion.models import EMOTIONS, EmotionScores

LIKELIHOOD_SCORES = {
    "VERY_LIKELY": 0.9,
    "LIKELY": 0.7,
    "POSSIBLE": 0.5,
    "UNLIKELY": 0.3,
    "VERY_UNLIKELY": 0.1,
}
UNKNOWN_LIKELIHOOD_SCORE = 0.1


def likelihood_score(likelihood: str | None) -> float:
    """Map a Vision API likelihood enum to a raw score."""
    return LIKELIHOOD_SCORES.get(likelihood or "", UNKNOWN_LIKELIHOOD_SCORE)


def round_score(value: float) -> float:
    """Round half away from zero to 3 decimals."""
    return math.floor(value * 1000 + 0.5) / 1000


def normalize_scores(raw: Mapping[str, float]) -> EmotionScores:
    """Scale raw scores to sum to 1.0.

    Missing or negative components count as 0. Raises NoSignalError when
    nothing is left to scale, so an all-zero vector is never returned.
    """
    values = {name: max(float(raw.get(name, 0.0)), 0.0) for name in EMOTIONS}
    total = sum(values.values())
    if not total > 0 or not math.isfinite(total):
        raise NoSignalError(f"Scores carry no signal (sum={total})")
    return EmotionScores(**{name: round_score(v / total) for name, v in values.items()})
