"""Comparison of two assessments' scores."""

from dataclasses import dataclass, field

from aaprp.scoring.progress import round_half_up

# Deltas smaller than this (in percentage points) count as no change
STABLE_BAND = 1.0


@dataclass
class ScoreComparison:
    current: float
    previous: float
    delta: float
    percentage_change: float
    trend: str


@dataclass
class ImprovementAreas:
    improved: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)


def compare_scores(current: float | None, previous: float | None) -> ScoreComparison:
    """Delta and trend between two overall scores. Missing scores count as 0."""
    current = current or 0.0
    previous = previous or 0.0
    delta = round_half_up(current - previous, 2)

    if previous > 0:
        percentage_change = round_half_up(delta / previous * 100, 2)
    else:
        percentage_change = 100.0 if delta > 0 else 0.0

    if abs(delta) < STABLE_BAND:
        trend = "STABLE"
    elif delta > 0:
        trend = "IMPROVING"
    else:
        trend = "DECLINING"

    return ScoreComparison(
        current=current,
        previous=previous,
        delta=delta,
        percentage_change=percentage_change,
        trend=trend,
    )


def identify_improvement_areas(
    current: dict[str, float | None],
    previous: dict[str, float | None],
    threshold: float = 5,
) -> ImprovementAreas:
    """Split categories by how far their score moved between assessments."""
    result = ImprovementAreas()
    for code in sorted(set(current) | set(previous)):
        delta = (current.get(code) or 0) - (previous.get(code) or 0)
        if delta >= threshold:
            result.improved.append(code)
        elif delta <= -threshold:
            result.declined.append(code)
        else:
            result.unchanged.append(code)
    return result
