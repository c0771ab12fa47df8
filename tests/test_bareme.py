# tests/test_bareme.py
import logging

import pytest
import yaml

from bilans.core.bareme import (
    DEFAULT_PRESET_PATH,
    BaremePreset,
    apply_preset_by_position,
    canonical_competency_key,
    competency_totals,
    default_preset,
    default_scheme,
    effective_competency_scheme,
    effective_scheme,
    exercise_catalog,
    scheme_from_dict,
    scheme_to_dict,
    scheme_total_points,
    validate_scheme,
)
from bilans.core.models import ExerciseScheme


@pytest.fixture
def preset():
    """Barème prédéfini de 3 exercices."""
    return BaremePreset(
        name="Test",
        exercises={
            "1": ExerciseScheme(total_points=6, question_points={"q0": 6},
                                question_competence_points={"q0": {"Calculer": 6}}),
            "2": ExerciseScheme(total_points=4, question_points={"q0": 4},
                                question_competence_points={"q0": {"Chercher": 4}}),
            "3": ExerciseScheme(total_points=10, question_points={"q0": 10},
                                question_competence_points={"q0": {"Raisonner": 10}}),
        },
    )


@pytest.fixture
def exam_exercises():
    """Exercices d'un sujet numérotés 2, 5 et 7."""
    return {
        "2": ExerciseScheme(total_points=1),
        "5": ExerciseScheme(total_points=2),
        "7": ExerciseScheme(total_points=3),
    }


class TestApplyPresetByPosition:
    def test_remap_by_index(self, preset, exam_exercises):
        """L'exercice N du barème va sur la N-ième clé, pas sur la clé de même nom."""
        result = apply_preset_by_position(exam_exercises, preset)

        assert list(result) == ["2", "5", "7"]
        assert result["2"].total_points == 6
        assert result["5"].total_points == 4
        assert result["7"].total_points == 10
        assert result["7"].question_competence_points == {"q0": {"Raisonner": 10}}

    def test_input_not_mutated(self, preset, exam_exercises):
        """Le barème de l'appelant et le barème prédéfini restent intacts."""
        apply_preset_by_position(exam_exercises, preset)

        assert exam_exercises["2"].total_points == 1
        assert preset.exercises["1"].total_points == 6

    def test_result_does_not_share_preset_objects(self, preset, exam_exercises):
        result = apply_preset_by_position(exam_exercises, preset)
        result["2"].question_points["q0"] = 0

        assert preset.exercises["1"].question_points["q0"] == 6

    def test_unmatched_keys_unchanged(self, preset):
        """Les clés au-delà du barème prédéfini sont conservées."""
        exercises = {str(i): ExerciseScheme(total_points=i) for i in range(1, 6)}
        result = apply_preset_by_position(exercises, preset)

        assert result["3"].total_points == 10
        assert result["4"].total_points == 4
        assert result["5"].total_points == 5

    def test_out_of_order_keys_logged(self, preset, caplog):
        """Un ordre non croissant est appliqué tel quel mais signalé."""
        exercises = {"5": ExerciseScheme(), "2": ExerciseScheme()}
        with caplog.at_level(logging.WARNING, logger="bilans.core.bareme"):
            result = apply_preset_by_position(exercises, preset)

        assert result["5"].total_points == 6
        assert result["2"].total_points == 4
        assert "hors ordre" in caplog.text

    def test_empty_exercises(self, preset):
        assert apply_preset_by_position({}, preset) == {}


class TestCompetencyKeys:
    @pytest.mark.parametrize("name,expected", [
        ("Calculer", "Calculer"),
        ("Calculer (automatismes)", "Calculer"),
        ("Représenter graphiquement", "Représenter"),
    ])
    def test_canonical_key(self, name, expected):
        """Le texte avant le premier espace sert de clé."""
        assert canonical_competency_key(name) == expected

    def test_totals_merge_variants(self):
        scheme = {
            "1": ExerciseScheme(question_competence_points={
                "q0": {"Calculer": 1, "Calculer (automatismes)": 0.5},
            }),
        }
        assert competency_totals(scheme) == {"Calculer": 1.5}


class TestDefaultScheme:
    def test_totals_match_preset_bilan(self):
        """Le bilan du barème embarqué correspond à la somme des points de compétence."""
        totals = competency_totals(default_scheme())
        assert totals == {
            "Modéliser": 6,
            "Calculer": 6,
            "Chercher": 4,
            "Raisonner": 2,
            "Communiquer": 2,
        }
        assert default_preset().bilan == totals

    def test_total_is_twenty(self):
        assert scheme_total_points(default_scheme()) == 20

    def test_fresh_copy(self):
        """Chaque appel retourne un barème indépendant."""
        first = default_scheme()
        first["1"].total_points = 0
        assert default_scheme()["1"].total_points == 6

    def test_read_from_packaged_preset(self):
        """Le barème embarqué est celui du fichier YAML fourni avec le paquet."""
        with open(DEFAULT_PRESET_PATH, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        assert scheme_to_dict(default_scheme()) == scheme_to_dict(scheme_from_dict(data["exercises"]))
        assert default_preset().name == data["name"]

    def test_catalog_max_from_scheme(self):
        """Les maxima affichés suivent le barème, pas une table figée."""
        assert [e.max for e in exercise_catalog()] == [6, 4, 3, 4, 3]

    def test_default_is_consistent(self):
        assert validate_scheme(default_scheme()) == []


class TestEffectiveScheme:
    def test_configured_with_competences(self):
        scheme = {"1": ExerciseScheme(question_competence_points={"q0": {"Chercher": 2}})}
        assert effective_competency_scheme(scheme) is scheme

    def test_fallback_without_competences(self):
        """Un barème sans points de compétence retombe sur le barème embarqué."""
        scheme = {"1": ExerciseScheme(total_points=20, question_points={"q0": 20})}
        assert list(effective_competency_scheme(scheme)) == ["1", "2", "3", "4", "5"]
        assert effective_scheme(scheme) is scheme

    def test_fallback_when_empty(self):
        assert list(effective_scheme({})) == ["1", "2", "3", "4", "5"]
        assert list(effective_competency_scheme(None)) == ["1", "2", "3", "4", "5"]


class TestSchemeConversion:
    def test_camel_case_round_trip(self):
        """La forme JSON/YAML (camelCase) est conservée."""
        data = scheme_to_dict(default_scheme())
        assert data["1"]["totalPoints"] == 6
        assert data["5"]["questionCompetencePoints"]["q1"] == {"Communiquer": 2}
        assert scheme_from_dict(data)["2"].question_points["q1"] == 0.5

    def test_catalog_names_and_max(self):
        """Les exercices connus gardent leur nom, les autres sont numérotés."""
        scheme = {
            "1": ExerciseScheme(total_points=8),
            "9": ExerciseScheme(total_points=2),
        }
        catalog = exercise_catalog(scheme)

        assert [(e.key, e.name, e.max) for e in catalog] == [
            ("1", "Course", 8),
            ("9", "Exercice 9", 2),
        ]


class TestValidateScheme:
    def test_reports_inconsistencies(self):
        """Les incohérences sont listées sans lever d'exception."""
        scheme = {
            "1": ExerciseScheme(
                total_points=5,
                question_points={"q0": 2, "q1": -1},
                question_competence_points={"q0": {"Chercher": 2}, "q2": {"Calculer": 1}},
            ),
        }
        warnings = validate_scheme(scheme)

        assert any("points négatifs" in w for w in warnings)
        assert any("q1" in w and "sans compétence" in w for w in warnings)
        assert any("q2" in w and "sans points" in w for w in warnings)
        assert any("différent de la somme" in w for w in warnings)
