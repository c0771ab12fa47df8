"""Statistiques de cohorte (classe ou ensemble des classes)."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np

from bilans.core.bareme import DEFAULT_COMPETENCES, ExerciseInfo, exercise_catalog
from bilans.core.mastery import classify_percentage
from bilans.core.models import CorrectedCandidate, MasteryLevel, round_half_away
from bilans.core.scoring import ScoringEngine


# Valeur affichée pour une statistique sans données (cohorte vide)
NO_DATA = "--"

ALL_CLASSES = "all"
SCORE_SCALE = 20

# Seuils fixes des recommandations pédagogiques (taux de réussite en %)
URGENT_BELOW = 50
STRENGTH_FROM = 70

Stat = Union[float, str]


@dataclass
class DistributionBin:
    """Tranche de notes [low, high)."""
    low: float
    high: float
    count: int = 0
    pct: int = 0

    @property
    def label(self) -> str:
        return f"{self.low:g}-{self.high:g}"


@dataclass
class ExerciseStat:
    """Réussite moyenne d'un exercice sur la cohorte."""
    info: ExerciseInfo
    mean: float = 0.0
    success_rate: int = 0
    count: int = 0


@dataclass
class CompetencyStat:
    """Réussite moyenne d'une compétence sur la cohorte."""
    name: str
    mean_score: float = 0.0
    mean_max: float = 0.0
    success_rate: int = 0
    count: int = 0

    @property
    def niveau(self) -> MasteryLevel:
        return classify_percentage(self.success_rate)


@dataclass
class Recommendations:
    """Exercices classés par taux de réussite (<50, 50-70, >=70)."""
    urgent: List[ExerciseStat] = field(default_factory=list)
    priority: List[ExerciseStat] = field(default_factory=list)
    strength: List[ExerciseStat] = field(default_factory=list)


@dataclass
class CohortSummary:
    """Statistiques descriptives des notes, « -- » si la cohorte est vide."""
    count: int = 0
    mean: Stat = NO_DATA
    median: Stat = NO_DATA
    q1: Stat = NO_DATA
    q3: Stat = NO_DATA
    minimum: Stat = NO_DATA
    maximum: Stat = NO_DATA
    champion: Optional[CorrectedCandidate] = None


def filter_by_class(candidates: Sequence[CorrectedCandidate], classe: str = ALL_CLASSES) -> List[CorrectedCandidate]:
    """Filtre par classe, « all » conserve tout le monde."""
    if not classe or classe == ALL_CLASSES:
        return list(candidates)
    return [c for c in candidates if c.classe == classe]


def classes(candidates: Sequence[CorrectedCandidate]) -> List[str]:
    return sorted({c.classe for c in candidates})


def notes_by_class(candidates: Sequence[CorrectedCandidate]) -> Dict[str, List[CorrectedCandidate]]:
    """Candidats de chaque classe, du meilleur au moins bon."""
    return {
        classe: sorted(
            (c for c in candidates if c.classe == classe),
            key=lambda c: c.note,
            reverse=True,
        )
        for classe in classes(candidates)
    }


class CohortStatistics:
    """Statistiques d'une cohorte de candidats corrigés."""

    def __init__(
        self,
        candidates: Sequence[CorrectedCandidate],
        engine: Optional[ScoringEngine] = None,
    ):
        """
        Initialise le calcul.

        Args:
            candidates: Candidats corrigés, déjà filtrés par classe si besoin
            engine: Moteur de calcul, requis pour les taux par exercice/compétence
        """
        self.candidates = list(candidates)
        self.engine = engine
        self.notes = np.sort(np.array([c.note for c in self.candidates], dtype=float))

    def __len__(self) -> int:
        return len(self.candidates)

    @property
    def is_empty(self) -> bool:
        return len(self.candidates) == 0

    def _require_engine(self) -> ScoringEngine:
        if self.engine is None:
            raise ValueError("Un ScoringEngine est requis pour les taux de réussite")
        return self.engine

    # Tendance centrale

    def mean(self) -> Stat:
        if self.is_empty:
            return NO_DATA
        return float(np.mean(self.notes))

    def median(self) -> Stat:
        """
        Médiane : moyenne des deux valeurs centrales si l'effectif est pair,
        sinon la valeur d'index n // 2.
        """
        n = len(self.notes)
        if n == 0:
            return NO_DATA
        if n % 2 == 0:
            return float((self.notes[n // 2 - 1] + self.notes[n // 2]) / 2)
        return float(self.notes[n // 2])

    def quartiles(self) -> Tuple[Stat, Stat]:
        """
        Q1 et Q3 par rang (index n // 4 et 3n // 4), sans interpolation.

        Estimation positionnelle grossière, conservée telle quelle.
        """
        n = len(self.notes)
        if n == 0:
            return NO_DATA, NO_DATA
        return float(self.notes[n // 4]), float(self.notes[(3 * n) // 4])

    def minimum(self) -> Stat:
        if self.is_empty:
            return NO_DATA
        return float(self.notes[0])

    def maximum(self) -> Stat:
        if self.is_empty:
            return NO_DATA
        return float(self.notes[-1])

    def champion(self) -> Optional[CorrectedCandidate]:
        """Meilleure note ; en cas d'égalité le premier rencontré. None si vide."""
        if self.is_empty:
            return None
        best = self.candidates[0]
        for candidate in self.candidates[1:]:
            if candidate.note > best.note:
                best = candidate
        return best

    def summary(self) -> CohortSummary:
        q1, q3 = self.quartiles()
        return CohortSummary(
            count=len(self.candidates),
            mean=self.mean(),
            median=self.median(),
            q1=q1,
            q3=q3,
            minimum=self.minimum(),
            maximum=self.maximum(),
            champion=self.champion(),
        )

    # Répartitions

    def distribution(self, bin_width: float = 2, upper: float = SCORE_SCALE) -> List[DistributionBin]:
        """
        Répartition des notes par tranches de largeur fixe sur [0, upper).

        Une note égale à ``upper`` compte dans la dernière tranche ; les notes
        hors échelle ne sont pas comptées.
        """
        if bin_width <= 0:
            raise ValueError(f"Largeur de tranche invalide: {bin_width}")

        bins = []
        low = 0.0
        while low < upper:
            bins.append(DistributionBin(low=low, high=low + bin_width))
            low += bin_width

        for note in self.notes:
            for bin_ in bins:
                if bin_.low <= note < bin_.high:
                    bin_.count += 1
                    break
            else:
                if note == upper:
                    bins[-1].count += 1

        n = len(self.notes)
        for bin_ in bins:
            bin_.pct = int(round_half_away(bin_.count / n * 100)) if n else 0
        return bins

    def mastery_counts(self) -> Dict[MasteryLevel, int]:
        """Effectif par niveau, du plus haut au plus bas."""
        counts = {level: 0 for level in (MasteryLevel.TBM, MasteryLevel.MS, MasteryLevel.MF, MasteryLevel.MI)}
        for candidate in self.candidates:
            counts[candidate.niveau] += 1
        return counts

    # Taux de réussite

    def exercise_stats(self, catalog: Optional[List[ExerciseInfo]] = None) -> List[ExerciseStat]:
        """
        Moyenne et taux de réussite par exercice.

        Les candidats sans note pour un exercice sont exclus de la moyenne
        (ils ne comptent pas pour zéro).
        """
        engine = self._require_engine()
        catalog = catalog if catalog is not None else exercise_catalog(engine.context.scheme)
        all_scores = [engine.exercise_scores(c.numero) for c in self.candidates]

        stats = []
        for info in catalog:
            earned = [scores[info.key] for scores in all_scores if info.key in scores]
            count = len(earned)
            mean = sum(earned) / count if count else 0.0
            rate = int(round_half_away(mean / info.max * 100)) if count and info.max > 0 else 0
            stats.append(ExerciseStat(info=info, mean=mean, success_rate=rate, count=count))
        return stats

    def exercise_success_rates(self, catalog: Optional[List[ExerciseInfo]] = None) -> Dict[str, int]:
        return {stat.info.key: stat.success_rate for stat in self.exercise_stats(catalog)}

    def competency_stats(self) -> List[CompetencyStat]:
        """Taux de réussite par compétence, sur les candidats qui en ont une mesure."""
        engine = self._require_engine()
        totals: Dict[str, List[float]] = {}

        for candidate in self.candidates:
            for comp, data in engine.competency_scores(candidate.numero).items():
                acc = totals.setdefault(comp, [0.0, 0.0, 0])
                acc[0] += data.score
                acc[1] += data.max
                acc[2] += 1

        ordered = [c for c in DEFAULT_COMPETENCES if c in totals]
        ordered += [c for c in totals if c not in DEFAULT_COMPETENCES]

        stats = []
        for comp in ordered:
            score_sum, max_sum, count = totals[comp]
            mean_score = score_sum / count
            mean_max = max_sum / count
            rate = int(round_half_away(mean_score / mean_max * 100)) if mean_max > 0 else 0
            stats.append(CompetencyStat(
                name=comp,
                mean_score=mean_score,
                mean_max=mean_max,
                success_rate=rate,
                count=int(count),
            ))
        return stats

    def competency_success_rates(self) -> Dict[str, int]:
        return {stat.name: stat.success_rate for stat in self.competency_stats()}

    def recommendations(self, catalog: Optional[List[ExerciseInfo]] = None) -> Recommendations:
        """Priorité absolue (<50 %), à améliorer (50-70 %), points forts (>=70 %)."""
        result = Recommendations()
        for stat in self.exercise_stats(catalog):
            if stat.success_rate < URGENT_BELOW:
                result.urgent.append(stat)
            elif stat.success_rate < STRENGTH_FROM:
                result.priority.append(stat)
            else:
                result.strength.append(stat)
        return result
