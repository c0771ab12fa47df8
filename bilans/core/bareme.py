"""Barème : points et compétences par exercice et par question."""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional
import yaml

from bilans.core.models import ExerciseScheme, ScoringScheme

logger = logging.getLogger(__name__)


# Barème du sujet embarqué (DNB Blanc n°1), utilisé quand aucun barème n'est configuré
DEFAULT_PRESET_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "presets", "bb1_2025.yaml")

DEFAULT_COMPETENCES = ["Chercher", "Modéliser", "Calculer", "Raisonner", "Communiquer"]


@dataclass(frozen=True)
class ExerciseInfo:
    """Métadonnées d'affichage d'un exercice."""
    key: str
    name: str
    max: float
    icon: str = "📝"
    color: str = "#6b7280"


# Nom, icône et couleur des exercices du sujet ; le maximum vient toujours du barème
EXERCISE_DISPLAY: Dict[str, tuple] = {
    "1": ("Course", "🏃", "#22c55e"),
    "2": ("Bonbons", "🍬", "#8b5cf6"),
    "3": ("CO2", "🌍", "#3b82f6"),
    "4": ("Scratch", "🐱", "#f59e0b"),
    "5": ("Trajet", "🚗", "#ef4444"),
}


@dataclass
class BaremePreset:
    """Barème prédéfini nommé (ex: DNB Blanc n°1)."""
    name: str = ""
    total_max: float = 20.0
    exercises: ScoringScheme = field(default_factory=dict)
    bilan: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BaremePreset":
        return cls(
            name=str(data.get("name", "")),
            total_max=float(data.get("totalMax", 20) or 20),
            exercises=scheme_from_dict(data.get("exercises") or {}),
            bilan={k: float(v) for k, v in (data.get("bilan") or {}).items()},
        )


@lru_cache(maxsize=None)
def _default_preset_data() -> Dict[str, Any]:
    with open(DEFAULT_PRESET_PATH, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def default_preset() -> BaremePreset:
    """Barème embarqué, lu depuis le fichier YAML fourni avec le paquet."""
    return BaremePreset.from_dict(_default_preset_data())


def default_scheme() -> ScoringScheme:
    """Retourne une copie neuve du barème embarqué."""
    return default_preset().exercises


def scheme_from_dict(data: Mapping[str, Mapping[str, Any]]) -> ScoringScheme:
    """Convertit la forme JSON/YAML ``{exercice: {...}}`` en barème typé."""
    return {str(ex_key): ExerciseScheme.from_dict(ex_data or {}) for ex_key, ex_data in data.items()}


def scheme_to_dict(scheme: ScoringScheme) -> Dict[str, Dict[str, Any]]:
    return {ex_key: ex.to_dict() for ex_key, ex in scheme.items()}


def canonical_competency_key(name: str) -> str:
    """
    Clé canonique d'une compétence : le texte avant le premier espace.

    "Calculer (automatismes)" et "Calculer" sont ainsi fusionnés.
    """
    return str(name).split(" ")[0]


def has_competency_points(scheme: Optional[ScoringScheme]) -> bool:
    """Vrai si au moins un exercice alloue des points de compétence."""
    if not scheme:
        return False
    return any(ex.question_competence_points for ex in scheme.values())


def effective_competency_scheme(scheme: Optional[ScoringScheme]) -> ScoringScheme:
    """Barème configuré s'il définit des points de compétence, sinon le barème embarqué."""
    if has_competency_points(scheme):
        return scheme
    return default_scheme()


def effective_scheme(scheme: Optional[ScoringScheme]) -> ScoringScheme:
    """Barème configuré s'il n'est pas vide, sinon le barème embarqué."""
    return scheme if scheme else default_scheme()


def competency_totals(scheme: ScoringScheme) -> Dict[str, float]:
    """Points maximum par compétence canonique (le « bilan » d'un barème)."""
    totals: Dict[str, float] = {}
    for ex in scheme.values():
        for comp_points in ex.question_competence_points.values():
            for comp_name, points in comp_points.items():
                key = canonical_competency_key(comp_name)
                totals[key] = totals.get(key, 0.0) + (points or 0)
    return totals


def scheme_total_points(scheme: ScoringScheme) -> float:
    return sum(ex.total_points for ex in scheme.values())


def exercise_catalog(scheme: Optional[ScoringScheme] = None) -> List[ExerciseInfo]:
    """
    Liste ordonnée des exercices à afficher pour un barème.

    Les exercices connus reprennent le nom et l'icône du sujet embarqué,
    le maximum vient toujours du barème.
    """
    scheme = effective_scheme(scheme)
    catalog = []
    for ex_key, ex in scheme.items():
        known = EXERCISE_DISPLAY.get(ex_key)
        if known:
            name, icon, color = known
            catalog.append(ExerciseInfo(ex_key, name, ex.total_points, icon, color))
        else:
            catalog.append(ExerciseInfo(ex_key, f"Exercice {ex_key}", ex.total_points))
    return catalog


def validate_scheme(scheme: ScoringScheme) -> List[str]:
    """
    Liste les incohérences d'un barème sans jamais lever d'exception.

    Les deux passes du calcul (points et compétences) sont indépendantes,
    ces avertissements sont donc informatifs.
    """
    warnings = []
    for ex_key, ex in scheme.items():
        for q_key, points in ex.question_points.items():
            if points < 0:
                warnings.append(f"Ex{ex_key} {q_key}: points négatifs ({points})")
            if q_key not in ex.question_competence_points:
                warnings.append(f"Ex{ex_key} {q_key}: points sans compétence associée")
        for q_key in ex.question_competence_points:
            if q_key not in ex.question_points:
                warnings.append(f"Ex{ex_key} {q_key}: compétences sans points de question")
        question_sum = sum(ex.question_points.values())
        if ex.question_points and abs(question_sum - ex.total_points) > 1e-9:
            warnings.append(
                f"Ex{ex_key}: total {ex.total_points} différent de la somme des questions ({question_sum})"
            )
    return warnings


def _is_exam_order(keys: List[str]) -> bool:
    try:
        numbers = [float(k) for k in keys]
    except ValueError:
        return False
    return numbers == sorted(numbers)


def apply_preset_by_position(
    exercises: ScoringScheme,
    preset: BaremePreset,
) -> ScoringScheme:
    """
    Applique un barème prédéfini par remappage séquentiel (par index).

    L'exercice N du barème (clé "N", à partir de 1) est copié sur la N-ième
    clé d'exercice de l'appelant, dans l'ordre d'insertion, et non sur la clé
    de même nom : un sujet numéroté 2..6 reçoit ainsi les exercices 1..5.
    Seuls ``total_points``, ``question_points``, ``question_competences`` et
    ``question_competence_points`` sont remplacés ; les clés sans
    correspondance restent inchangées.

    Précondition (non vérifiée) : les clés de l'appelant sont dans l'ordre du
    sujet. Un ordre non croissant est seulement signalé dans les logs.

    Args:
        exercises: Barème courant de l'appelant (non modifié)
        preset: Barème prédéfini à appliquer

    Returns:
        Nouveau barème avec les exercices remplacés
    """
    keys = list(exercises.keys())
    if keys and not _is_exam_order(keys):
        logger.warning(
            "Barème '%s' appliqué par position sur des exercices hors ordre du sujet: %s",
            preset.name, keys,
        )

    result: ScoringScheme = {}
    for index, ex_key in enumerate(keys):
        preset_key = str(index + 1)
        preset_ex = preset.exercises.get(preset_key)
        if preset_ex is None:
            result[ex_key] = exercises[ex_key].copy()
            continue

        result[ex_key] = preset_ex.copy()
        logger.info("Barème Ex%s appliqué depuis Ex%s: %s pts", ex_key, preset_key, preset_ex.total_points)

    return result
