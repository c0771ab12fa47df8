# tests/test_statistics.py
import pytest

from bilans.core.mastery import classify
from bilans.core.models import CorrectedCandidate, GradingContext, MasteryLevel
from bilans.core.scoring import ScoringEngine
from bilans.core.statistics import (
    NO_DATA,
    CohortStatistics,
    filter_by_class,
    notes_by_class,
)


def make_candidates(notes, classe="3A"):
    return [
        CorrectedCandidate(
            numero=i + 1,
            nom=f"Nom{i + 1}",
            prenom=f"Prenom{i + 1}",
            classe=classe,
            note=note,
            niveau=classify(note),
        )
        for i, note in enumerate(notes)
    ]


@pytest.fixture
def rates_engine():
    """5 candidats dont 3 seulement ont corrigé l'exercice 2 (Bonbons, /4)."""
    raw = {
        "1": {"1": {"q0": {"score": 6}}, "2": {"q0": {"score": 4}}},
        "2": {"1": {"q0": {"score": 3}}, "2": {"q0": {"score": 2}}},
        "3": {"1": {"q0": {"score": 0}}, "2": {"q0": {"score": 0}}},
        "4": {"1": {"q0": {"score": 1.5}}},
        "5": {"1": {"q0": {"score": 1.5}}},
    }
    return ScoringEngine(GradingContext(raw_scores=raw))


class TestCentralTendency:
    def test_median_odd(self):
        assert CohortStatistics(make_candidates([15, 5, 10])).median() == 10

    def test_median_even(self):
        """Effectif pair : moyenne des deux valeurs centrales."""
        assert CohortStatistics(make_candidates([20, 5, 15, 10])).median() == 12.5

    def test_quartiles_by_rank(self):
        """Q1 et Q3 aux index n // 4 et 3n // 4, sans interpolation."""
        stats = CohortStatistics(make_candidates([0, 4, 8, 10, 12, 14, 18, 20]))
        assert stats.quartiles() == (8, 18)

    def test_mean_min_max(self):
        stats = CohortStatistics(make_candidates([12, 8, 16]))

        assert stats.mean() == 12
        assert stats.minimum() == 8
        assert stats.maximum() == 16

    def test_empty_cohort(self):
        """Cohorte vide : « -- » partout, pas d'exception."""
        stats = CohortStatistics([])
        summary = stats.summary()

        assert stats.mean() == NO_DATA
        assert stats.median() == NO_DATA
        assert stats.quartiles() == (NO_DATA, NO_DATA)
        assert summary.minimum == NO_DATA
        assert summary.maximum == NO_DATA
        assert summary.champion is None
        assert summary.count == 0


class TestChampion:
    def test_first_of_ties(self):
        """En cas d'égalité, le premier rencontré l'emporte."""
        candidates = make_candidates([12, 17, 9, 17])
        assert CohortStatistics(candidates).champion().numero == 2

    def test_single(self):
        candidates = make_candidates([3])
        assert CohortStatistics(candidates).champion() is candidates[0]


class TestDistribution:
    def test_twenty_in_last_bin(self):
        """Une note de 20 compte dans la dernière tranche [18, 20)."""
        bins = CohortStatistics(make_candidates([20, 19.5, 0, 3.9])).distribution()

        assert len(bins) == 10
        assert bins[-1].label == "18-20"
        assert bins[-1].count == 2
        assert bins[0].count == 1
        assert bins[1].count == 1
        assert sum(b.count for b in bins) == 4

    def test_percentages(self):
        bins = CohortStatistics(make_candidates([2, 7, 12, 17])).distribution(bin_width=5)

        assert [b.count for b in bins] == [1, 1, 1, 1]
        assert [b.pct for b in bins] == [25, 25, 25, 25]

    def test_empty(self):
        bins = CohortStatistics([]).distribution()
        assert all(b.count == 0 and b.pct == 0 for b in bins)

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            CohortStatistics([]).distribution(bin_width=0)

    def test_mastery_counts(self):
        counts = CohortStatistics(make_candidates([18, 15, 12, 7, 2, 1])).mastery_counts()

        assert list(counts) == [MasteryLevel.TBM, MasteryLevel.MS, MasteryLevel.MF, MasteryLevel.MI]
        assert counts == {MasteryLevel.TBM: 2, MasteryLevel.MS: 1, MasteryLevel.MF: 1, MasteryLevel.MI: 2}


class TestSuccessRates:
    def test_candidates_without_data_excluded(self, rates_engine):
        """Seuls les 3 candidats ayant une note pour l'exercice comptent."""
        stats = CohortStatistics(rates_engine.corrected_candidates(), rates_engine)
        by_key = {s.info.key: s for s in stats.exercise_stats()}

        assert by_key["2"].count == 3
        assert by_key["2"].mean == 2
        assert by_key["2"].success_rate == 50
        assert by_key["1"].success_rate == 40
        assert by_key["3"].count == 0
        assert by_key["3"].success_rate == 0

    def test_rates_dict(self, rates_engine):
        stats = CohortStatistics(rates_engine.corrected_candidates(), rates_engine)
        rates = stats.exercise_success_rates()

        assert rates["2"] == 50
        assert list(rates) == ["1", "2", "3", "4", "5"]

    def test_engine_required(self):
        with pytest.raises(ValueError):
            CohortStatistics(make_candidates([10])).exercise_stats()

    def test_recommendations(self, rates_engine):
        """<50 % : priorité absolue, 50-70 % : à améliorer, >=70 % : point fort."""
        stats = CohortStatistics(rates_engine.corrected_candidates(), rates_engine)
        reco = stats.recommendations()

        assert [s.info.key for s in reco.urgent] == ["1", "3", "4", "5"]
        assert [s.info.key for s in reco.priority] == ["2"]
        assert reco.strength == []

    def test_competency_rates(self, context):
        engine = ScoringEngine(context)
        stats = CohortStatistics(engine.corrected_candidates(), engine)
        rates = stats.competency_success_rates()

        assert list(rates)[:5] == ["Chercher", "Modéliser", "Calculer", "Raisonner", "Communiquer"]
        # Calculer : (4 + 1,25 + 0) / (6 × 3)
        assert rates["Calculer"] == 29


class TestGrouping:
    def test_filter_by_class(self):
        candidates = make_candidates([10, 12], "3A") + make_candidates([8], "3B")

        assert len(filter_by_class(candidates, "all")) == 3
        assert [c.note for c in filter_by_class(candidates, "3B")] == [8]
        assert filter_by_class(candidates, "3C") == []

    def test_notes_by_class_sorted(self):
        candidates = make_candidates([10, 14, 6], "3A") + make_candidates([8], "3B")
        grouped = notes_by_class(candidates)

        assert list(grouped) == ["3A", "3B"]
        assert [c.note for c in grouped["3A"]] == [14, 10, 6]
