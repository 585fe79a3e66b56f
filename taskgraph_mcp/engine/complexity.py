"""Complexity heuristic for tasks.

Each metric is placed in a tier on its own (a value strictly above a
threshold reaches that tier); the overall level is the highest tier any
single metric reaches.
"""

from taskgraph_mcp.enums import ComplexityLevel
from taskgraph_mcp.models.results import ComplexityAssessment, ComplexityMetrics
from taskgraph_mcp.models.task import Task

# (medium, high, very_high)
DESCRIPTION_LENGTH_THRESHOLDS = (500, 1000, 2000)
DEPENDENCIES_COUNT_THRESHOLDS = (2, 5, 10)
NOTES_LENGTH_THRESHOLDS = (200, 500, 1000)

_LEVEL_ORDER = [
    ComplexityLevel.LOW,
    ComplexityLevel.MEDIUM,
    ComplexityLevel.HIGH,
    ComplexityLevel.VERY_HIGH,
]


def _tier(value: int, thresholds: tuple[int, int, int]) -> ComplexityLevel:
    level = ComplexityLevel.LOW
    for threshold, candidate in zip(thresholds, _LEVEL_ORDER[1:]):
        if value > threshold:
            level = candidate
    return level


def _recommendations(level: ComplexityLevel, metrics: ComplexityMetrics) -> list[str]:
    recommendations: list[str] = []

    if level == ComplexityLevel.VERY_HIGH:
        recommendations.append(
            "Complexity is very high: consider splitting this task into smaller, independent subtasks"
        )
        recommendations.append("Set clear milestones and checkpoints to track progress")
    elif level == ComplexityLevel.HIGH:
        recommendations.append("Complexity is high: plan the design before writing code")
        recommendations.append("Consider splitting the task if it grows further")
    elif level == ComplexityLevel.MEDIUM:
        recommendations.append("Moderate complexity: review the details before starting")

    if metrics.dependencies_count > DEPENDENCIES_COUNT_THRESHOLDS[0]:
        recommendations.append(
            "Many prerequisites: check the output of each dependency before starting and keep to dependency order"
        )

    if metrics.notes_length > NOTES_LENGTH_THRESHOLDS[0]:
        recommendations.append("Extensive notes: read them carefully for special requirements")

    if level == ComplexityLevel.LOW:
        recommendations.append("Low complexity: no special handling needed")

    return recommendations


def assess_complexity(task: Task) -> ComplexityAssessment:
    """
    Classify a task's complexity from simple textual and structural metrics.

    Args:
        task: Task to assess

    Returns:
        ComplexityAssessment with level, raw metrics and recommendations
    """
    metrics = ComplexityMetrics(
        description_length=len(task.description or ""),
        dependencies_count=len(task.dependencies),
        notes_length=len(task.notes or ""),
        has_notes=bool(task.notes),
    )

    tiers = [
        _tier(metrics.description_length, DESCRIPTION_LENGTH_THRESHOLDS),
        _tier(metrics.dependencies_count, DEPENDENCIES_COUNT_THRESHOLDS),
        _tier(metrics.notes_length, NOTES_LENGTH_THRESHOLDS),
    ]
    level = max(tiers, key=_LEVEL_ORDER.index)

    return ComplexityAssessment(
        level=level,
        metrics=metrics,
        recommendations=_recommendations(level, metrics),
    )
