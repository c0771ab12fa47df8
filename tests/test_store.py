# tests/test_store.py
import json

import pytest

from bilans.core.bareme import default_scheme
from bilans.core.models import Candidate, MasteryThresholds
from bilans.data.loaders import Corrections
from bilans.data.store import CORRECTIONS_KEY, ROSTER_KEY, LocalStore


@pytest.fixture
def store(tmp_path):
    return LocalStore(str(tmp_path / "data"))


class TestLocalStore:
    def test_set_get(self, store):
        store.set("cle", {"a": 1})
        assert store.get("cle") == {"a": 1}

    def test_stored_with_timestamp(self, store):
        store.set("cle", [1, 2])
        with open(store._get_path("cle"), encoding="utf-8") as f:
            stored = json.load(f)

        assert stored["data"] == [1, 2]
        assert "timestamp" in stored

    def test_missing_key(self, store):
        assert store.get("absent") is None

    def test_corrupt_file(self, store):
        """Un fichier illisible est ignoré (None), sans exception."""
        with open(store._get_path("cle"), "w", encoding="utf-8") as f:
            f.write("{pas du json")
        assert store.get("cle") is None

    def test_delete_and_clear(self, store):
        store.set("a", 1)
        store.set("b", 2)
        store.delete("a")

        assert store.get("a") is None
        assert store.get("b") == 2

        store.clear()
        assert store.get("b") is None

    def test_safe_key(self, store):
        store.set("x/y", 1)
        assert store.get("x/y") == 1


class TestTypedAccess:
    def test_corrections(self, store):
        corrections = Corrections(scores={"12": {"1": {"q0": {"score": 2}}}}, comments={"12": "Bien"})
        store.save_corrections(corrections)

        assert store.load_corrections() == corrections

    def test_defaults_when_empty(self, store):
        """Stockage vide : pas de corrections, seuils et barème par défaut."""
        assert store.load_corrections().scores == {}
        assert store.load_roster() == []
        assert store.load_thresholds() == MasteryThresholds()
        assert store.load_scheme() == {}

    def test_roster(self, store):
        roster = [Candidate(numero=12, nom="Martin", prenom="Léa", classe="3A")]
        store.save_roster(roster)

        assert store.load_roster() == roster

    def test_thresholds_and_scheme(self, store):
        store.save_thresholds(MasteryThresholds(tbm=16, ms=11, mf=6))
        store.save_scheme(default_scheme())

        assert store.load_thresholds().tbm == 16
        assert store.load_scheme()["5"].question_competence_points["q1"] == {"Communiquer": 2}

    def test_load_context(self, store):
        store.save_corrections(Corrections(scores={"12": {}}, comments={"12": "Bien"}))
        store.save_roster([Candidate(numero=12, nom="Martin", prenom="Léa", classe="3A")])
        context = store.load_context(selected_class="3A")

        assert list(context.raw_scores) == ["12"]
        assert context.comments == {"12": "Bien"}
        assert context.classes == ["3A"]
        assert context.selected_class == "3A"

    def test_keys_independent(self, store):
        store.save_roster([Candidate(numero=1)])
        store.delete(CORRECTIONS_KEY)

        assert store.get(ROSTER_KEY) is not None
