"""Classification des niveaux de maîtrise.

Deux systèmes de seuils coexistent et ne doivent pas être fusionnés :

* le niveau global (note sur 20) utilise des seuils configurables
  (``MasteryThresholds``, par défaut 15 / 10 / 5) ;
* le niveau par compétence utilise des bandes fixes sur le pourcentage
  (75 / 50 / 25), non configurables.
"""

from typing import Dict, Optional

from bilans.core.models import MasteryLevel, MasteryThresholds, round_half_away


# Bandes fixes en pourcentage pour les compétences
COMPETENCY_BANDS = (
    (75, MasteryLevel.TBM),
    (50, MasteryLevel.MS),
    (25, MasteryLevel.MF),
)

NIVEAU_LABELS: Dict[MasteryLevel, str] = {
    MasteryLevel.TBM: "Très bonne maîtrise",
    MasteryLevel.MS: "Maîtrise satisfaisante",
    MasteryLevel.MF: "Maîtrise fragile",
    MasteryLevel.MI: "Maîtrise insuffisante",
}


def classify(score: float, thresholds: Optional[MasteryThresholds] = None) -> MasteryLevel:
    """
    Niveau global d'une note, comparée aux seuils du plus haut au plus bas.

    Args:
        score: Note totale (échelle des points, 0-20 en pratique)
        thresholds: Seuils configurés (défauts 15/10/5 si None)
    """
    thresholds = thresholds or MasteryThresholds()

    if score >= thresholds.tbm:
        return MasteryLevel.TBM
    elif score >= thresholds.ms:
        return MasteryLevel.MS
    elif score >= thresholds.mf:
        return MasteryLevel.MF
    return MasteryLevel.MI


def classify_percentage(pct: float) -> MasteryLevel:
    """Niveau d'une compétence à partir de son pourcentage (bandes fixes)."""
    for cutoff, level in COMPETENCY_BANDS:
        if pct >= cutoff:
            return level
    return MasteryLevel.MI


def competency_percentage(score: float, max_points: float) -> int:
    """Pourcentage entier d'une compétence, 0 si aucun point n'est alloué."""
    if max_points <= 0:
        return 0
    return int(round_half_away(score / max_points * 100))


def niveau_label(niveau: MasteryLevel) -> str:
    return NIVEAU_LABELS.get(niveau, str(niveau))
