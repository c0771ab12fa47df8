"""Construction des données de bilans (individuels et de classe) pour l'affichage et l'export."""

import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import pandas as pd

from bilans.core.bareme import competency_totals, effective_competency_scheme, exercise_catalog
from bilans.core.mastery import classify_percentage, competency_percentage, niveau_label
from bilans.core.models import CorrectedCandidate, MasteryLevel, round_half_away
from bilans.core.scoring import QuestionGrid, ScoringEngine
from bilans.core.statistics import (
    NO_DATA,
    SCORE_SCALE,
    CohortStatistics,
    CohortSummary,
    CompetencyStat,
    ExerciseStat,
    Recommendations,
    notes_by_class,
)


DEFAULT_EXAM_TITLE = "DNB Blanc - Décembre 2025"

RESULTS_COLUMNS = ["numero", "nom", "prenom", "classe", "note", "note_affichee", "niveau"]


def collation_key(text: str) -> str:
    """Clé de tri insensible à la casse et aux accents (« Émile » avant « Fabien »)."""
    decomposed = unicodedata.normalize("NFD", str(text or ""))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def sort_candidates(candidates: Sequence[CorrectedCandidate]) -> List[CorrectedCandidate]:
    """Tri par classe puis par nom, sans modifier la séquence reçue."""
    return sorted(candidates, key=lambda c: (collation_key(c.classe), collation_key(c.nom)))


def format_score(value) -> str:
    """Note à une décimale ; « -- » reste « -- »."""
    if value == NO_DATA or value is None:
        return NO_DATA
    return f"{round_half_away(value, 1):.1f}"


def format_percent(value) -> str:
    if value == NO_DATA or value is None:
        return NO_DATA
    return f"{int(round_half_away(value))}%"


def results_table(candidates: Sequence[CorrectedCandidate]) -> pd.DataFrame:
    """
    Tableau des résultats trié par classe puis par nom.

    Returns:
        DataFrame avec numero, nom, prenom, classe, note, note_affichee, niveau
    """
    data = [
        {
            "numero": c.numero,
            "nom": c.nom,
            "prenom": c.prenom,
            "classe": c.classe,
            "note": round_half_away(c.note, 1),
            "note_affichee": format_score(c.note),
            "niveau": c.niveau.value,
        }
        for c in sort_candidates(candidates)
    ]
    return pd.DataFrame(data, columns=RESULTS_COLUMNS)


@dataclass
class ExerciseCard:
    key: str
    name: str
    icon: str
    score: float
    max: float
    color: str = "#6b7280"

    @property
    def display(self) -> str:
        return f"{self.score:g}/{self.max:g}"


@dataclass
class CompetencyRow:
    name: str
    score: float
    max: float
    pct: int
    niveau: MasteryLevel

    @property
    def pct_display(self) -> str:
        return format_percent(self.pct)


@dataclass
class IndividualReport:
    """Bilan individuel d'un candidat."""
    title: str
    numero: object
    nom: str
    prenom: str
    classe: str
    note: float
    note_display: str
    niveau: MasteryLevel
    niveau_label: str
    exercises: List[ExerciseCard] = field(default_factory=list)
    competences: List[CompetencyRow] = field(default_factory=list)
    comment: str = ""
    grid: Optional[QuestionGrid] = None


@dataclass
class ClassExerciseCard:
    name: str
    icon: str
    mean_display: str
    pct: int
    color: str


@dataclass
class ClassReport:
    """Bilan d'une classe (ou de toutes les classes)."""
    title: str
    class_label: str
    count: int
    summary: CohortSummary = field(default_factory=CohortSummary)
    stats: Dict[str, str] = field(default_factory=dict)
    quick_stats: Dict[str, str] = field(default_factory=dict)
    distribution: List[Dict[str, object]] = field(default_factory=list)
    histogram: List[Dict[str, object]] = field(default_factory=list)
    mastery: List[Dict[str, object]] = field(default_factory=list)
    notes_by_class: Dict[str, List[str]] = field(default_factory=dict)
    exercises: List[ClassExerciseCard] = field(default_factory=list)
    competences: List[CompetencyStat] = field(default_factory=list)
    recommendations: Recommendations = field(default_factory=Recommendations)


class ReportBuilder:
    """Assemble les résultats du moteur en structures prêtes pour l'affichage."""

    def __init__(self, engine: ScoringEngine, exam_title: str = DEFAULT_EXAM_TITLE):
        self.engine = engine
        self.exam_title = exam_title

    def _competency_names(self, extra: Sequence[str] = ()) -> List[str]:
        names = list(competency_totals(effective_competency_scheme(self.engine.context.scheme)))
        names += [name for name in extra if name not in names]
        return names

    def individual_report(self, candidate: CorrectedCandidate) -> IndividualReport:
        """Bilan individuel : exercices, compétences, note, niveau, commentaire."""
        exercise_scores = self.engine.exercise_scores(candidate.numero)
        breakdown = self.engine.competency_scores(candidate.numero)

        exercises = [
            ExerciseCard(
                key=info.key,
                name=info.name,
                icon=info.icon,
                score=exercise_scores.get(info.key, 0),
                max=info.max,
                color=info.color,
            )
            for info in exercise_catalog(self.engine.context.scheme)
        ]

        competences = []
        for name in self._competency_names(list(breakdown)):
            data = breakdown.get(name)
            score = data.score if data else 0.0
            max_points = data.max if data else 0.0
            pct = competency_percentage(score, max_points)
            competences.append(CompetencyRow(
                name=name,
                score=score,
                max=max_points,
                pct=pct,
                niveau=classify_percentage(pct),
            ))

        return IndividualReport(
            title=self.exam_title,
            numero=candidate.numero,
            nom=candidate.nom,
            prenom=candidate.prenom,
            classe=candidate.classe,
            note=candidate.note,
            note_display=f"{format_score(candidate.note)}/{SCORE_SCALE}",
            niveau=candidate.niveau,
            niveau_label=niveau_label(candidate.niveau),
            exercises=exercises,
            competences=competences,
            comment=self.engine.comment(candidate.numero),
            grid=self.engine.question_grid(candidate.numero),
        )

    def results_table(self, candidates: Sequence[CorrectedCandidate]) -> pd.DataFrame:
        return results_table(candidates)

    def quick_stats(self, candidates: Sequence[CorrectedCandidate]) -> Dict[str, str]:
        """Indicateurs rapides (moyenne, médiane, étendue, meilleure note)."""
        stats = CohortStatistics(candidates)
        if stats.is_empty:
            return {
                "moyenne": NO_DATA,
                "mediane": NO_DATA,
                "etendue": NO_DATA,
                "champion": NO_DATA,
                "champion_nom": "Meilleure note",
            }

        champion = stats.champion()
        return {
            "moyenne": f"{format_score(stats.mean())}/{SCORE_SCALE}",
            "mediane": f"{format_score(stats.median())}/{SCORE_SCALE}",
            "etendue": f"{format_score(stats.minimum())} - {format_score(stats.maximum())}",
            "champion": f"{format_score(stats.maximum())}/{SCORE_SCALE}",
            "champion_nom": champion.prenom or f"N°{champion.numero}",
        }

    def class_report(self, candidates: Sequence[CorrectedCandidate], class_label: str = "Toutes classes") -> ClassReport:
        """Bilan de classe : statistiques, répartitions, notes par classe, exercices."""
        stats = CohortStatistics(candidates, self.engine)
        summary = stats.summary()

        distribution = [
            {"label": f"{b.low:g} à {b.high:g}", "count": b.count, "pct": b.pct}
            for b in stats.distribution(bin_width=5)
        ]
        histogram = [
            {"label": b.label, "count": b.count, "pct": b.pct}
            for b in stats.distribution(bin_width=2)
        ]

        n = len(stats)
        mastery = [
            {
                "niveau": level,
                "label": niveau_label(level),
                "count": count,
                "pct": int(round_half_away(count / n * 100)) if n else 0,
            }
            for level, count in stats.mastery_counts().items()
        ]

        exercises = []
        recommendations = Recommendations()
        competences: List[CompetencyStat] = []
        if not stats.is_empty:
            exercise_stats: List[ExerciseStat] = stats.exercise_stats()
            exercises = [
                ClassExerciseCard(
                    name=s.info.name,
                    icon=s.info.icon,
                    mean_display=f"{format_score(s.mean)}/{s.info.max:g}",
                    pct=s.success_rate,
                    color=s.info.color,
                )
                for s in exercise_stats
            ]
            recommendations = stats.recommendations()
            competences = stats.competency_stats()

        return ClassReport(
            title=self.exam_title,
            class_label=class_label,
            count=summary.count,
            summary=summary,
            stats={
                "moyenne": format_score(summary.mean),
                "mediane": format_score(summary.median),
                "q1": format_score(summary.q1),
                "q3": format_score(summary.q3),
                "min": format_score(summary.minimum),
                "max": format_score(summary.maximum),
            },
            quick_stats=self.quick_stats(candidates),
            distribution=distribution,
            histogram=histogram,
            mastery=mastery,
            notes_by_class={
                classe: [format_score(c.note) for c in members]
                for classe, members in notes_by_class(candidates).items()
            },
            exercises=exercises,
            competences=competences,
            recommendations=recommendations,
        )
