# tests/test_components.py
import pandas as pd

from bilans.core.mastery import NIVEAU_LABELS
from bilans.core.models import MasteryLevel
from bilans.core.statistics import CohortStatistics
from bilans.ui.components.charts import (
    BarChart,
    BoxPlotChart,
    DonutChart,
    RadarChart,
    histogram_color,
    success_rate_color,
)
from bilans.ui.components.tables import ResultsTable, niveau_style
from bilans.ui.components.widgets import NiveauBadge


class TestCharts:
    def test_bar_chart(self):
        fig = BarChart(["Course", "CO2"], [80, 40], y_max=100, y_suffix="%").figure()

        assert list(fig.data[0].y) == [80, 40]
        assert list(fig.layout.yaxis.range) == [0, 100]

    def test_donut_order_and_colors(self):
        counts = {MasteryLevel.TBM: 2, MasteryLevel.MS: 1, MasteryLevel.MF: 0, MasteryLevel.MI: 3}
        fig = DonutChart(counts, NIVEAU_LABELS).figure()

        assert list(fig.data[0].labels)[0] == "Très bonne maîtrise"
        assert list(fig.data[0].values) == [2, 1, 0, 3]

    def test_box_plot_empty_cohort(self):
        """Aucune trace pour une cohorte vide."""
        assert len(BoxPlotChart(CohortStatistics([]).summary()).figure().data) == 0

    def test_radar_closed(self):
        fig = RadarChart(["Chercher", "Calculer", "Raisonner"], [50, 75, 100]).figure()

        assert list(fig.data[0].theta) == ["Chercher", "Calculer", "Raisonner", "Chercher"]
        assert len(RadarChart([], []).figure().data) == 0

    def test_colors(self):
        assert success_rate_color(70) == "#10b981"
        assert success_rate_color(49) == "#f59e0b"
        assert histogram_color(0) == "#ef4444"
        assert histogram_color(9) == "#10b981"


class TestTables:
    def test_niveau_style(self):
        assert "background-color" in niveau_style("TBM")
        assert niveau_style("autre") == ""

    def test_display_frame(self):
        data = pd.DataFrame([{
            "numero": 1, "nom": "Martin", "prenom": "Léa", "classe": "3A",
            "note": 16.0, "note_affichee": "16.0", "niveau": "TBM",
        }])
        frame = ResultsTable(data).display_frame()

        assert list(frame.columns) == ["N°", "Nom", "Prénom", "Classe", "Note /20", "Niveau"]

    def test_badge(self):
        assert NiveauBadge(MasteryLevel.MI).render() == "🔴 MI"
        assert NiveauBadge(MasteryLevel.TBM, with_label=True).render() == "🟢 TBM – Très bonne maîtrise"
