# tests/conftest.py
import os
import sys

import pytest

# Ajouter le répertoire parent au path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from bilans.core.models import Candidate, GradingContext, MasteryThresholds


def question(score, **competences):
    """Question corrigée au format de l'application de correction."""
    return {"score": score, "competences": competences}


@pytest.fixture
def raw_scores():
    """Corrections de 3 candidats sur le barème embarqué (1 à 5)."""
    return {
        "101": {
            "1": {
                "q0": question(2.5, Modéliser=1, Calculer=1.5),
                "q1": question(2.5, Modéliser=1, Calculer=1.5),
                "q2": question(1, Calculer=1),
            },
            "2": {
                "q0": question(1, Chercher=1),
                "q3": question(1, Raisonner=1),
            },
            "5": {"q1": question(2, Communiquer=2)},
        },
        "102": {
            "1": {"q0": question(1.25, **{"Calculer (automatismes)": 1.25})},
            "3": {"q0": question(0.5, Chercher=0.5)},
        },
        "103": {
            "4": {
                "q0": question(1, Modéliser=1),
                "q1": question(1, Modéliser=1),
            },
        },
    }


@pytest.fixture
def roster():
    """Liste d'élèves : 103 n'y figure pas, 104 n'a pas de correction."""
    return [
        Candidate(numero=101, nom="Martin", prenom="Léa", classe="3A"),
        Candidate(numero=102, nom="Écrivain", prenom="Hugo", classe="3B"),
        Candidate(numero=104, nom="Durand", prenom="Zoé", classe="3A"),
    ]


@pytest.fixture
def context(raw_scores, roster):
    return GradingContext(
        raw_scores=raw_scores,
        roster=roster,
        thresholds=MasteryThresholds(),
        comments={"101": "Très bon travail"},
        quick_buttons={"103": {"4": {"q2": "nr"}}},
    )
