"""Page des statistiques de classe."""

from typing import List
import streamlit as st
import pandas as pd

from bilans.core.mastery import NIVEAU_LABELS
from bilans.core.models import CorrectedCandidate
from bilans.core.reports import ReportBuilder
from bilans.ui.components.charts import (
    BarChart,
    BoxPlotChart,
    DonutChart,
    histogram_color,
    success_rate_color,
)
from bilans.ui.components.tables import DataTable
from bilans.ui.components.widgets import MetricCard


class StatisticsPage:
    """Statistiques, répartitions et recommandations pour la sélection courante."""

    def __init__(self, builder: ReportBuilder, candidates: List[CorrectedCandidate], class_label: str):
        self.builder = builder
        self.candidates = candidates
        self.class_label = class_label

    def render(self):
        """Affiche la page complète."""
        report = self.builder.class_report(self.candidates, self.class_label)
        quick = report.quick_stats

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            MetricCard("Moyenne", quick["moyenne"]).render()
        with col2:
            MetricCard("Médiane", quick["mediane"]).render()
        with col3:
            MetricCard("Étendue", quick["etendue"]).render()
        with col4:
            MetricCard(quick["champion_nom"], quick["champion"], help_text="Meilleure note").render()

        if report.count == 0:
            st.info("Aucune donnée")
            return

        st.divider()

        col_left, col_right = st.columns(2)
        with col_left:
            mastery_counts = {m["niveau"]: m["count"] for m in report.mastery}
            DonutChart(mastery_counts, NIVEAU_LABELS, title="Niveaux de maîtrise").render()
        with col_right:
            histogram = report.histogram
            BarChart(
                labels=[b["label"] for b in histogram],
                values=[b["count"] for b in histogram],
                title="Répartition des notes",
                x_label="Note sur 20",
                y_label="Nombre d'élèves",
                colors=[histogram_color(i) for i in range(len(histogram))],
            ).render()

        col_left, col_right = st.columns(2)
        with col_left:
            rates = [card.pct for card in report.exercises]
            BarChart(
                labels=[card.name for card in report.exercises],
                values=rates,
                title="Taux de réussite par exercice",
                colors=[success_rate_color(r) for r in rates],
                y_max=100,
                y_suffix="%",
            ).render()
        with col_right:
            BoxPlotChart(report.summary, title="Dispersion des notes").render()
            st.caption(" · ".join(f"{k.upper()} {v}" for k, v in report.stats.items()))

        st.divider()
        self._render_exercise_cards(report)
        st.divider()
        self._render_competences(report)
        st.divider()
        self._render_recommendations(report)

    def _render_exercise_cards(self, report):
        st.subheader("📝 Détail par exercice")
        columns = st.columns(max(len(report.exercises), 1))
        for col, card in zip(columns, report.exercises):
            with col:
                st.markdown(f"### {card.icon}")
                st.caption(card.name)
                st.markdown(f"**{card.mean_display}**")
                st.progress(min(max(card.pct, 0), 100) / 100)
                st.caption(f"{card.pct}% de réussite")

    def _render_competences(self, report):
        data = pd.DataFrame({
            "Compétence": [c.name for c in report.competences],
            "Moyenne": [f"{c.mean_score:.1f}/{c.mean_max:g}" for c in report.competences],
            "Réussite": [f"{c.success_rate}%" for c in report.competences],
            "Niveau": [c.niveau.value for c in report.competences],
        })
        DataTable(data, title="🧠 Compétences", height=240).render()

    def _render_recommendations(self, report):
        st.subheader("🎯 Recommandations pédagogiques")
        reco = report.recommendations
        blocks = [
            ("🚨 Priorité absolue", "Exercices avec moins de 50% de réussite", reco.urgent, "Aucun exercice critique"),
            ("⚠️ À améliorer", "Exercices entre 50% et 70%", reco.priority, "Aucun exercice dans cette zone"),
            ("✅ Points forts", "Exercices avec plus de 70% de réussite", reco.strength, "Aucun point fort identifié"),
        ]
        for col, (title, desc, items, empty) in zip(st.columns(3), blocks):
            with col:
                st.markdown(f"**{title}**")
                st.caption(desc)
                if items:
                    for stat in items:
                        st.write(f"{stat.info.icon} {stat.info.name} ({stat.success_rate}%)")
                else:
                    st.write(empty)
