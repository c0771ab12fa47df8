"""Modèles de données."""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Any, Union


Numero = Union[int, str]

# Structure brute des corrections: candidat -> exercice -> question -> {score, competences}
RawScores = Dict[str, Dict[str, Dict[str, Dict[str, Any]]]]


def parse_numero(value: Any) -> Numero:
    """Convertit un numéro de candidat en entier quand c'est possible."""
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        try:
            as_float = float(text)
        except ValueError:
            return text
        return int(as_float) if as_float.is_integer() else text


def round_half_away(value: float, ndigits: int = 0) -> float:
    """Arrondi "à la main" (0,5 s'éloigne de zéro), contrairement à round()."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class MasteryLevel(str, Enum):
    """Niveaux de maîtrise, ordonnés MI < MF < MS < TBM."""
    MI = "MI"
    MF = "MF"
    MS = "MS"
    TBM = "TBM"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, MasteryLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, MasteryLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, MasteryLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, MasteryLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER = [MasteryLevel.MI, MasteryLevel.MF, MasteryLevel.MS, MasteryLevel.TBM]


@dataclass(frozen=True)
class MasteryThresholds:
    """Seuils (en points sur 20) du niveau de maîtrise global."""
    tbm: float = 15.0
    ms: float = 10.0
    mf: float = 5.0

    def __post_init__(self):
        if not (self.tbm >= self.ms >= self.mf):
            raise ValueError(
                f"Seuils incohérents: tbm={self.tbm}, ms={self.ms}, mf={self.mf} "
                "(attendu tbm >= ms >= mf)"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MasteryThresholds":
        """Construit les seuils depuis un dict stocké, avec les défauts pour les clés absentes."""
        data = data or {}
        defaults = cls()
        return cls(
            tbm=float(data.get("tbm", defaults.tbm)),
            ms=float(data.get("ms", defaults.ms)),
            mf=float(data.get("mf", defaults.mf)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"tbm": self.tbm, "ms": self.ms, "mf": self.mf}


@dataclass
class ExerciseScheme:
    """Barème d'un exercice."""
    total_points: float = 0.0
    question_points: Dict[str, float] = field(default_factory=dict)
    question_competences: Dict[str, List[str]] = field(default_factory=dict)
    question_competence_points: Dict[str, Dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExerciseScheme":
        """Construit un barème depuis la forme JSON/YAML (clés camelCase)."""
        return cls(
            total_points=float(data.get("totalPoints", 0) or 0),
            question_points={
                q: float(p or 0) for q, p in (data.get("questionPoints") or {}).items()
            },
            question_competences={
                q: list(comps) for q, comps in (data.get("questionCompetences") or {}).items()
            },
            question_competence_points={
                q: {c: float(p or 0) for c, p in comps.items()}
                for q, comps in (data.get("questionCompetencePoints") or {}).items()
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPoints": self.total_points,
            "questionPoints": dict(self.question_points),
            "questionCompetences": {q: list(c) for q, c in self.question_competences.items()},
            "questionCompetencePoints": {
                q: dict(c) for q, c in self.question_competence_points.items()
            },
        }

    def copy(self) -> "ExerciseScheme":
        return ExerciseScheme.from_dict(self.to_dict())


ScoringScheme = Dict[str, ExerciseScheme]


@dataclass
class Candidate:
    """Élève issu de la liste importée (désanonymat)."""
    numero: Numero = 0
    nom: str = ""
    prenom: str = ""
    classe: str = ""

    @classmethod
    def placeholder(cls, numero: Numero) -> "Candidate":
        """Identité de repli pour un candidat corrigé absent de la liste."""
        return cls(numero=numero, nom="Candidat", prenom=str(numero), classe="Non attribué")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        return cls(
            numero=parse_numero(data.get("numero", "")),
            nom=str(data.get("nom", "") or ""),
            prenom=str(data.get("prenom", "") or ""),
            classe=str(data.get("classe", "") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"numero": self.numero, "nom": self.nom, "prenom": self.prenom, "classe": self.classe}


@dataclass(frozen=True)
class CorrectedCandidate:
    """Projection calculée d'un candidat corrigé (jamais stockée)."""
    numero: Numero
    nom: str
    prenom: str
    classe: str
    note: float
    niveau: MasteryLevel

    @property
    def display_name(self) -> str:
        return f"{self.nom} {self.prenom}".strip()


@dataclass
class CompetencyScore:
    """Points obtenus et maximum pour une compétence."""
    score: float = 0.0
    max: float = 0.0

    @property
    def percentage(self) -> int:
        """Pourcentage entier, 0 si aucun point n'est alloué."""
        if self.max <= 0:
            return 0
        return int(round_half_away(self.score / self.max * 100))


CompetencyBreakdown = Dict[str, CompetencyScore]


@dataclass
class GradingContext:
    """État explicite d'une session de bilans."""
    raw_scores: RawScores = field(default_factory=dict)
    roster: List[Candidate] = field(default_factory=list)
    scheme: ScoringScheme = field(default_factory=dict)
    thresholds: MasteryThresholds = field(default_factory=MasteryThresholds)
    selected_class: str = "all"

    # Données annexes de la correction
    comments: Dict[str, str] = field(default_factory=dict)
    quick_buttons: Dict[str, Dict[str, Dict[str, str]]] = field(default_factory=dict)

    def roster_index(self) -> Dict[str, Candidate]:
        """Index numéro -> élève (la première occurrence l'emporte)."""
        index: Dict[str, Candidate] = {}
        for candidate in self.roster:
            index.setdefault(str(candidate.numero), candidate)
        return index

    @property
    def classes(self) -> List[str]:
        """Classes distinctes de la liste d'élèves, triées."""
        return sorted({c.classe for c in self.roster})
