"""Core module - Logique métier pure."""

from bilans.core.bareme import (
    BaremePreset,
    apply_preset_by_position,
    canonical_competency_key,
    default_scheme,
)
from bilans.core.mastery import classify, classify_percentage
from bilans.core.models import (
    Candidate,
    CompetencyScore,
    CorrectedCandidate,
    ExerciseScheme,
    GradingContext,
    MasteryLevel,
    MasteryThresholds,
)
from bilans.core.reports import ReportBuilder
from bilans.core.scoring import ScoringEngine
from bilans.core.statistics import NO_DATA, CohortStatistics

__all__ = [
    "BaremePreset",
    "apply_preset_by_position",
    "canonical_competency_key",
    "default_scheme",
    "classify",
    "classify_percentage",
    "Candidate",
    "CompetencyScore",
    "CorrectedCandidate",
    "ExerciseScheme",
    "GradingContext",
    "MasteryLevel",
    "MasteryThresholds",
    "ReportBuilder",
    "ScoringEngine",
    "NO_DATA",
    "CohortStatistics",
]
