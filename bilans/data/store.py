"""Sauvegarde locale des imports (équivalent du localStorage du navigateur)."""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from bilans.core.bareme import scheme_from_dict, scheme_to_dict
from bilans.core.models import Candidate, GradingContext, MasteryThresholds, ScoringScheme
from bilans.data.loaders import Corrections

logger = logging.getLogger(__name__)

CORRECTIONS_KEY = "dnb_correction_data"
ROSTER_KEY = "dnb_bilans_eleves"
THRESHOLDS_KEY = "dnb_maitrise_seuils"
SCHEME_KEY = "dnb_bareme_config"


class LocalStore:
    """Stockage clé/valeur basé sur des fichiers JSON."""

    def __init__(self, data_dir: str = ".bilans"):
        """Initialise le stockage."""
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)

    def _get_path(self, key: str) -> str:
        """Génère le chemin du fichier d'une clé."""
        # Remplacer les caractères problématiques
        safe_key = key.replace('/', '_').replace('\\', '_')
        return os.path.join(self.data_dir, f"{safe_key}.json")

    def get(self, key: str) -> Optional[Any]:
        """
        Récupère une valeur sauvegardée.

        Returns:
            Données sauvegardées, ou None si absentes ou illisibles
        """
        path = self._get_path(key)

        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                stored = json.load(f)
            return stored['data']
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.error("Erreur chargement '%s': %s", key, e)
            return None

    def set(self, key: str, data: Any) -> None:
        """Sauvegarde une valeur."""
        stored = {
            'timestamp': datetime.now().isoformat(),
            'data': data
        }

        with open(self._get_path(key), 'w', encoding='utf-8') as f:
            json.dump(stored, f, ensure_ascii=False, indent=2)

    def delete(self, key: str) -> None:
        """Supprime une clé."""
        path = self._get_path(key)
        if os.path.exists(path):
            os.remove(path)

    def clear(self) -> None:
        """Vide tout le stockage."""
        for filename in os.listdir(self.data_dir):
            if filename.endswith('.json'):
                os.remove(os.path.join(self.data_dir, filename))

    # Accès typés

    def save_corrections(self, corrections: Corrections) -> None:
        self.set(CORRECTIONS_KEY, corrections.to_dict())

    def load_corrections(self) -> Corrections:
        data = self.get(CORRECTIONS_KEY)
        return Corrections.from_dict(data) if isinstance(data, dict) and "scores" in data else Corrections()

    def save_roster(self, roster: List[Candidate]) -> None:
        self.set(ROSTER_KEY, [c.to_dict() for c in roster])

    def load_roster(self) -> List[Candidate]:
        return [Candidate.from_dict(item) for item in self.get(ROSTER_KEY) or []]

    def save_thresholds(self, thresholds: MasteryThresholds) -> None:
        self.set(THRESHOLDS_KEY, thresholds.to_dict())

    def load_thresholds(self) -> MasteryThresholds:
        return MasteryThresholds.from_dict(self.get(THRESHOLDS_KEY))

    def save_scheme(self, scheme: ScoringScheme) -> None:
        self.set(SCHEME_KEY, {"exercises": scheme_to_dict(scheme)})

    def load_scheme(self) -> ScoringScheme:
        data: Dict[str, Any] = self.get(SCHEME_KEY) or {}
        return scheme_from_dict(data.get("exercises") or {})

    def load_context(self, selected_class: str = "all") -> GradingContext:
        """Reconstruit le contexte de session depuis les données sauvegardées."""
        corrections = self.load_corrections()
        return GradingContext(
            raw_scores=corrections.scores,
            roster=self.load_roster(),
            scheme=self.load_scheme(),
            thresholds=self.load_thresholds(),
            selected_class=selected_class,
            comments=corrections.comments,
            quick_buttons=corrections.quick_buttons,
        )
