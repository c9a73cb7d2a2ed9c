"""Weather suitability scoring for events."""

from typing import Optional

from fairweather.models.event import SuitabilityLabel, SuitabilityResult, WeatherObservation

BASE_SCORE = 50

# Description keywords (case-insensitive substring) and their adjustments.
# Several keywords may match the same description.
DESCRIPTION_ADJUSTMENTS = (
    ("clear", 30),
    ("cloud", 10),
    ("rain", -30),
)

WINDY_THRESHOLD = 10.0  # m/s
WIND_PENALTY = -10

# Comfortable range in Kelvin, roughly 10-30 C
MIN_COMFORT_TEMP = 283.0
MAX_COMFORT_TEMP = 303.0
TEMP_PENALTY = -10

EVENT_TYPE_ADJUSTMENTS = {
    "wedding": 10,
    "sports": -5,
}


def label_for_score(score: int) -> SuitabilityLabel:
    """Map a score to its band. Thresholds are exclusive lower bounds."""
    if score > 80:
        return SuitabilityLabel.GREAT
    if score > 60:
        return SuitabilityLabel.GOOD
    if score > 40:
        return SuitabilityLabel.OKAY
    return SuitabilityLabel.POOR


def score_suitability(
    observation: Optional[WeatherObservation],
    event_type: Optional[str],
) -> SuitabilityResult:
    """Score how favorable the weather is for an event of the given type.

    Args:
        observation: Normalized weather, or None when no data was available
        event_type: Free-form event category

    Returns:
        SuitabilityResult with a score clamped to [0, 100]. A missing
        observation always yields score 0 and the "Unknown" label.
    """
    if observation is None:
        return SuitabilityResult(score=0, suitability=SuitabilityLabel.UNKNOWN)

    score = BASE_SCORE
    description = observation.description.lower()

    for keyword, adjustment in DESCRIPTION_ADJUSTMENTS:
        if keyword in description:
            score += adjustment

    if observation.wind > WINDY_THRESHOLD:
        score += WIND_PENALTY
    if observation.temp < MIN_COMFORT_TEMP or observation.temp > MAX_COMFORT_TEMP:
        score += TEMP_PENALTY

    score += EVENT_TYPE_ADJUSTMENTS.get(event_type, 0)

    score = max(0, min(100, score))
    return SuitabilityResult(score=score, suitability=label_for_score(score))
