"""Moteur de calcul des notes, compétences et niveaux des candidats."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bilans.core.bareme import canonical_competency_key, effective_competency_scheme, effective_scheme
from bilans.core.mastery import classify, classify_percentage
from bilans.core.models import (
    Candidate,
    CompetencyBreakdown,
    CompetencyScore,
    CorrectedCandidate,
    GradingContext,
    MasteryLevel,
    Numero,
    ScoringScheme,
    parse_numero,
    round_half_away,
)


QUESTION_ANSWERED = "answered"
QUESTION_NR = "nr"
QUESTION_EMPTY = "empty"


@dataclass
class ExerciseProgress:
    """Questions traitées d'un exercice pour un candidat."""
    key: str
    states: List[str] = field(default_factory=list)

    @property
    def answered(self) -> int:
        return self.states.count(QUESTION_ANSWERED)

    @property
    def total(self) -> int:
        return len(self.states)

    @property
    def complete(self) -> bool:
        return self.answered == self.total


@dataclass
class QuestionGrid:
    """Grille « questions traitées » (réponses, NR, vides) d'un candidat."""
    exercises: List[ExerciseProgress] = field(default_factory=list)

    @property
    def answered(self) -> int:
        return sum(ex.answered for ex in self.exercises)

    @property
    def total(self) -> int:
        return sum(ex.total for ex in self.exercises)

    @property
    def complete(self) -> bool:
        return self.answered == self.total


def _numero_index(mapping: Dict[Any, Any]) -> Dict[str, Any]:
    """Numéro normalisé -> clé d'origine ("012" et "12.0" sont retrouvés par 12)."""
    index: Dict[str, Any] = {}
    for key in mapping:
        index.setdefault(str(parse_numero(key)), key)
    return index


def _total(scores: Dict[str, Dict[str, Dict[str, Any]]]) -> float:
    total = 0.0
    for questions in scores.values():
        for question in (questions or {}).values():
            total += question.get("score") or 0
    return total


def _lookup(mapping: Dict[Any, Any], index: Dict[str, Any], candidate_id: Numero) -> Any:
    key = index.get(str(parse_numero(candidate_id)))
    if key is None:
        return None
    return mapping.get(key)


class ScoringEngine:
    """Calcule les notes, scores par exercice et par compétence des candidats."""

    def __init__(self, context: GradingContext):
        """
        Initialise le moteur de calcul.

        Args:
            context: Corrections, liste d'élèves, barème et seuils de la session.
                Le contexte n'est jamais modifié.
        """
        self.context = context
        self._scores_keys = _numero_index(context.raw_scores)
        self._comment_keys = _numero_index(context.comments)
        self._quick_keys = _numero_index(context.quick_buttons)

    def _candidate_scores(self, candidate_id: Numero) -> Dict[str, Dict[str, Dict[str, Any]]]:
        return _lookup(self.context.raw_scores, self._scores_keys, candidate_id) or {}

    def has_scores(self, candidate_id: Numero) -> bool:
        return bool(self._candidate_scores(candidate_id))

    def exercise_scores(self, candidate_id: Numero) -> Dict[str, float]:
        """
        Points obtenus par exercice, arrondis au dixième.

        Seuls les exercices présents dans les corrections figurent dans le résultat.
        """
        result = {}
        for ex_key, questions in self._candidate_scores(candidate_id).items():
            total = 0.0
            for question in (questions or {}).values():
                total += question.get("score") or 0
            result[str(ex_key)] = round_half_away(total, 1)
        return result

    def total_score(self, candidate_id: Numero) -> float:
        """Note totale, sans arrondi (l'affichage arrondit)."""
        return _total(self._candidate_scores(candidate_id))

    def competency_scores(self, candidate_id: Numero) -> CompetencyBreakdown:
        """
        Points obtenus et maximum par compétence canonique.

        1. Les maxima viennent du barème effectif (barème configuré s'il
           contient des points de compétence, sinon le barème embarqué).
        2. Les points obtenus viennent des ``competences`` saisies question
           par question.

        Une compétence n'apparaît que si l'une des deux passes lui apporte
        une valeur non nulle. Un candidat sans correction donne un dict vide.
        """
        scores = self._candidate_scores(candidate_id)
        if not scores:
            return {}

        result: CompetencyBreakdown = {}

        for ex in effective_competency_scheme(self.context.scheme).values():
            for comp_points in ex.question_competence_points.values():
                for comp_name, points in comp_points.items():
                    if not points:
                        continue
                    key = canonical_competency_key(comp_name)
                    result.setdefault(key, CompetencyScore()).max += points

        for questions in scores.values():
            for question in (questions or {}).values():
                competences = question.get("competences") or {}
                for comp_name, earned in competences.items():
                    if not earned:
                        continue
                    key = canonical_competency_key(comp_name)
                    result.setdefault(key, CompetencyScore()).score += earned

        return result

    def competency_levels(self, candidate_id: Numero) -> Dict[str, MasteryLevel]:
        """Niveau par compétence (bandes fixes 75/50/25 %)."""
        return {
            comp: classify_percentage(data.percentage)
            for comp, data in self.competency_scores(candidate_id).items()
        }

    def question_grid(self, candidate_id: Numero, scheme: Optional[ScoringScheme] = None) -> QuestionGrid:
        """
        Grille des questions traitées d'un candidat.

        Une question est traitée si elle a un état rapide (hors « nr ») ou des
        scores saisis ; « nr » marque une non-réponse explicite.
        """
        scheme = effective_scheme(scheme if scheme is not None else self.context.scheme)
        scores = self._candidate_scores(candidate_id)
        quick = self._candidate_quick_buttons(candidate_id)

        grid = QuestionGrid()
        for ex_key, ex in scheme.items():
            progress = ExerciseProgress(key=ex_key)
            ex_scores = scores.get(ex_key) or {}
            ex_quick = quick.get(ex_key) or {}

            for q_key in ex.question_points:
                quick_state = ex_quick.get(q_key)
                if quick_state == QUESTION_NR:
                    progress.states.append(QUESTION_NR)
                elif quick_state or ex_scores.get(q_key):
                    progress.states.append(QUESTION_ANSWERED)
                else:
                    progress.states.append(QUESTION_EMPTY)

            grid.exercises.append(progress)
        return grid

    def _candidate_quick_buttons(self, candidate_id: Numero) -> Dict[str, Dict[str, str]]:
        return _lookup(self.context.quick_buttons, self._quick_keys, candidate_id) or {}

    def corrected_candidates(self) -> List[CorrectedCandidate]:
        """
        Projection des candidats corrigés (ordre des corrections).

        Un candidat corrigé absent de la liste d'élèves reçoit une identité de
        repli ; un élève sans correction n'apparaît pas.
        """
        roster = self.context.roster_index()
        result = []

        for candidate_key in self.context.raw_scores:
            numero = parse_numero(candidate_key)
            eleve = roster.get(str(numero)) or Candidate.placeholder(numero)
            note = _total(self.context.raw_scores[candidate_key] or {})

            result.append(CorrectedCandidate(
                numero=numero,
                nom=eleve.nom,
                prenom=eleve.prenom,
                classe=eleve.classe,
                note=note,
                niveau=classify(note, self.context.thresholds),
            ))

        return result

    def corrected_candidate(self, numero: Numero) -> Optional[CorrectedCandidate]:
        """Candidat corrigé par numéro, None s'il n'existe pas."""
        for candidate in self.corrected_candidates():
            if str(candidate.numero) == str(parse_numero(numero)):
                return candidate
        return None

    def comment(self, numero: Numero) -> str:
        return _lookup(self.context.comments, self._comment_keys, numero) or ""
