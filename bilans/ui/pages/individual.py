"""Page du bilan individuel."""

from typing import List
import streamlit as st
import pandas as pd

from bilans.core.models import CorrectedCandidate
from bilans.core.reports import ReportBuilder, sort_candidates
from bilans.core.scoring import QUESTION_ANSWERED, QUESTION_NR
from bilans.ui.components.charts import RadarChart
from bilans.ui.components.widgets import MetricCard, NiveauBadge


GRID_SYMBOLS = {QUESTION_ANSWERED: "🟩", QUESTION_NR: "⬛"}


class IndividualPage:
    """Bilan d'un candidat : exercices, compétences, questions traitées."""

    def __init__(self, builder: ReportBuilder, candidates: List[CorrectedCandidate]):
        self.builder = builder
        self.candidates = sort_candidates(candidates)

    def render(self):
        """Affiche la page complète."""
        if not self.candidates:
            st.info("Aucun candidat corrigé pour cette sélection")
            return

        candidate = st.selectbox(
            "Choisir un candidat",
            options=self.candidates,
            format_func=lambda c: f"{c.nom} {c.prenom} ({c.classe}) – N°{c.numero}",
            key="individual_candidate_select"
        )
        report = self.builder.individual_report(candidate)

        st.subheader(f"{report.nom} {report.prenom} – {report.classe}")
        st.caption(report.title)

        col1, col2 = st.columns(2)
        with col1:
            MetricCard("Note", report.note_display).render()
        with col2:
            st.markdown(NiveauBadge(report.niveau, with_label=True).render())

        # Exercices
        columns = st.columns(max(len(report.exercises), 1))
        for col, card in zip(columns, report.exercises):
            with col:
                st.markdown(f"{card.icon} **{card.name}**")
                st.write(card.display)

        st.divider()

        # Compétences
        col_left, col_right = st.columns(2)
        with col_left:
            RadarChart(
                categories=[row.name for row in report.competences],
                values=[row.pct for row in report.competences],
                title="Compétences (%)"
            ).render()
        with col_right:
            detail_df = pd.DataFrame({
                "Compétence": [row.name for row in report.competences],
                "%": [row.pct_display for row in report.competences],
                "Niveau": [NiveauBadge(row.niveau).render() for row in report.competences],
            })
            st.dataframe(detail_df, use_container_width=True, hide_index=True)

        # Questions traitées
        st.subheader("Questions traitées")
        for progress, card in zip(report.grid.exercises, report.exercises):
            boxes = "".join(GRID_SYMBOLS.get(state, "⬜") for state in progress.states)
            st.write(f"{card.icon} {card.name} {boxes} {progress.answered}/{progress.total}")
        st.write(f"**Total : {report.grid.answered}/{report.grid.total}**")

        if report.comment:
            st.divider()
            st.markdown("**Commentaire du correcteur**")
            st.write(report.comment)
