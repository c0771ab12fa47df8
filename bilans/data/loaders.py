"""Chargeurs de données (corrections JSON et liste d'élèves CSV/Excel)."""

import json
import logging
import os
import re
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List
import pandas as pd

from bilans.core.models import Candidate, RawScores, parse_numero

logger = logging.getLogger(__name__)


class BilansImportError(Exception):
    """Exception de base pour les erreurs d'import."""
    pass


class CorrectionsFormatError(BilansImportError):
    """Fichier de corrections illisible ou sans scores."""
    pass


class RosterColumnsError(BilansImportError):
    """Colonnes numero / nom / prenom / classe introuvables."""
    pass


class RosterFormatError(BilansImportError):
    """Fichier d'élèves vide ou de format non supporté."""
    pass


@dataclass
class Corrections:
    """Corrections importées depuis l'application de correction."""
    scores: RawScores = field(default_factory=dict)
    comments: Dict[str, str] = field(default_factory=dict)
    quick_buttons: Dict[str, Dict[str, Dict[str, str]]] = field(default_factory=dict)
    validated_candidates: List[Any] = field(default_factory=list)
    active_candidates: List[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Corrections":
        """
        Détecte la structure du fichier.

        Accepte l'export de l'application ``{"appState": {"scores": ...}}``
        et la structure directe ``{"scores": ...}``.
        """
        if not isinstance(data, dict):
            raise CorrectionsFormatError("Le fichier JSON ne contient pas d'objet racine")

        if isinstance(data.get("appState"), dict) and "scores" in data["appState"]:
            source = data["appState"]
            logger.info("Format détecté : export application")
        elif "scores" in data:
            source = data
            logger.info("Format détecté : structure directe")
        else:
            raise CorrectionsFormatError(
                "Ce fichier JSON ne contient pas de corrections valides "
                "(clé 'scores' ou 'appState.scores' attendue)"
            )

        return cls(
            scores={str(k): v for k, v in (source.get("scores") or {}).items()},
            comments={str(k): v for k, v in (source.get("candidateComments") or {}).items()},
            quick_buttons={str(k): v for k, v in (source.get("quickButtonStates") or {}).items()},
            validated_candidates=list(source.get("validatedCandidates") or []),
            active_candidates=list(source.get("activeCandidates") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Forme normalisée (structure directe) pour la sauvegarde."""
        return {
            "scores": self.scores,
            "candidateComments": self.comments,
            "quickButtonStates": self.quick_buttons,
            "validatedCandidates": self.validated_candidates,
            "activeCandidates": self.active_candidates,
        }

    @property
    def candidate_count(self) -> int:
        return len(self.scores)


class DataLoader(ABC):
    """Classe de base pour les chargeurs de données."""

    def __init__(self, path: str):
        self.path = path

    @abstractmethod
    def load(self):
        """Charge le fichier et retourne les données typées."""
        pass


class CorrectionsLoader(DataLoader):
    """Chargeur du fichier JSON exporté par l'application de correction."""

    def load(self) -> Corrections:
        if not self.path.lower().endswith(".json"):
            raise CorrectionsFormatError(f"Fichier JSON attendu: {os.path.basename(self.path)}")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CorrectionsFormatError(f"Fichier JSON corrompu: {e}") from e

        corrections = Corrections.from_dict(data)
        logger.info("Corrections importées: %d candidats", corrections.candidate_count)
        return corrections


# Variantes d'en-têtes acceptées, testées dans l'ordre
NUMERO_VARIANTS = [
    'n ° candidat', 'n° candidat', 'n °candidat', 'n ° cand', 'numero',
    'n°', 'num', 'no', 'candidat', 'n °',
]
NOM_VARIANTS = ['nom']
PRENOM_VARIANTS = ['prenom']
CLASSE_VARIANTS = ['classe', 'class', 'division', 'groupe']


def normalize_header(header: Any) -> str:
    """Minuscules, sans accents, espaces multiples réduits."""
    text = unicodedata.normalize("NFD", str(header if header is not None else "").lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text).strip()


def _find_index(headers: List[str], variants: List[str]) -> int:
    for variant in variants:
        # Correspondance exacte d'abord, puis inclusion
        if variant in headers:
            return headers.index(variant)
        for idx, header in enumerate(headers):
            if variant in header:
                return idx
    return -1


def find_column_indexes(headers: List[Any]) -> Dict[str, int]:
    """
    Retrouve les colonnes numero, nom, prenom et classe.

    Raises:
        RosterColumnsError: si une des quatre colonnes manque
    """
    normalized = [normalize_header(h) for h in headers]
    indexes = {
        "numero": _find_index(normalized, NUMERO_VARIANTS),
        "nom": _find_index(normalized, NOM_VARIANTS),
        "prenom": _find_index(normalized, PRENOM_VARIANTS),
        "classe": _find_index(normalized, CLASSE_VARIANTS),
    }
    logger.debug("En-têtes %s -> index %s", normalized, indexes)

    missing = [name for name, idx in indexes.items() if idx == -1]
    if missing:
        raise RosterColumnsError(
            f"Colonnes manquantes: {', '.join(missing)} "
            f"(colonnes détectées: {', '.join(str(h) for h in headers)})"
        )
    return indexes


def _cell(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


class RosterLoader(DataLoader):
    """Chargeur de la liste d'élèves (CSV ou Excel)."""

    HEADER_SEARCH_ROWS = 5

    def load(self) -> List[Candidate]:
        extension = os.path.splitext(self.path)[1].lower()
        if extension == ".csv":
            candidates = self._load_csv()
        elif extension in (".xlsx", ".xls"):
            candidates = self._load_excel()
        else:
            raise RosterFormatError("Format non supporté. Utilisez CSV ou Excel (.xlsx)")

        logger.info(
            "Liste d'élèves importée: %d élèves, %d classes",
            len(candidates), len({c.classe for c in candidates}),
        )
        return candidates

    def _detect_encoding(self) -> str:
        # Les exports Excel français sont souvent en Windows-1252
        try:
            with open(self.path, 'r', encoding='utf-8-sig') as f:
                f.read()
        except UnicodeDecodeError:
            logger.info("Fichier non UTF-8, lecture en cp1252: %s", os.path.basename(self.path))
            return 'cp1252'
        return 'utf-8-sig'

    def _detect_separator(self, encoding: str) -> str:
        with open(self.path, 'r', encoding=encoding, errors='replace') as f:
            first_line = f.readline()
        return ';' if ';' in first_line else ','

    def _load_csv(self) -> List[Candidate]:
        encoding = self._detect_encoding()
        try:
            df = pd.read_csv(
                self.path,
                sep=self._detect_separator(encoding),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding=encoding,
                encoding_errors='replace',
            )
        except pd.errors.EmptyDataError as e:
            raise RosterFormatError("Le fichier est vide ou mal formaté") from e

        indexes = find_column_indexes(list(df.columns))
        candidates = [self._to_candidate(row, indexes) for row in df.itertuples(index=False, name=None)]
        return [c for c in candidates if c.nom or c.prenom or c.classe or c.numero != ""]

    def _find_header_row(self, rows: pd.DataFrame) -> int:
        for i in range(min(len(rows), self.HEADER_SEARCH_ROWS)):
            if any('nom' in _cell(cell).lower() for cell in rows.iloc[i]):
                return i
        return 0

    def _load_excel(self) -> List[Candidate]:
        # Première feuille, sans en-tête : la ligne d'en-têtes est cherchée à la main
        rows = pd.read_excel(self.path, sheet_name=0, header=None, dtype=object)
        if len(rows) < 2:
            raise RosterFormatError("Le fichier est vide ou mal formaté")

        header_row = self._find_header_row(rows)
        indexes = find_column_indexes([_cell(h) for h in rows.iloc[header_row]])

        candidates = []
        for row in rows.iloc[header_row + 1:].itertuples(index=False, name=None):
            candidate = self._to_candidate(row, indexes)
            if candidate.nom and candidate.prenom:
                candidates.append(candidate)
        return candidates

    @staticmethod
    def _to_candidate(row, indexes: Dict[str, int]) -> Candidate:
        return Candidate(
            numero=parse_numero(_cell(row[indexes["numero"]])),
            nom=_cell(row[indexes["nom"]]),
            prenom=_cell(row[indexes["prenom"]]),
            classe=_cell(row[indexes["classe"]]),
        )


def load_corrections(path: str) -> Corrections:
    return CorrectionsLoader(path).load()


def load_roster(path: str) -> List[Candidate]:
    return RosterLoader(path).load()
