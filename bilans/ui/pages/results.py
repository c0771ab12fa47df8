"""Page du tableau des résultats."""

import io
from typing import List
import streamlit as st

from bilans.core.models import CorrectedCandidate
from bilans.core.reports import results_table
from bilans.data.exporters import export_class_excel, export_filename, export_results_csv
from bilans.ui.components.tables import ResultsTable


class ResultsPage:
    """Page des résultats triés par classe puis par nom."""

    def __init__(self, candidates: List[CorrectedCandidate], class_label: str, exam_title: str):
        self.candidates = candidates
        self.class_label = class_label
        self.exam_title = exam_title

    def render(self):
        """Affiche la page complète."""
        table = results_table(self.candidates)
        ResultsTable(table, title=f"📋 Résultats – {self.class_label}").render()

        if table.empty:
            return

        st.divider()
        st.subheader("📥 Export")

        col1, col2 = st.columns(2)

        with col1:
            st.download_button(
                label="Télécharger les résultats (CSV)",
                data=export_results_csv(self.candidates),
                file_name=export_filename(self.class_label, "csv"),
                mime='text/csv'
            )

        with col2:
            buffer = io.BytesIO()
            export_class_excel(self.candidates, buffer, self.class_label, self.exam_title)
            st.download_button(
                label="Télécharger le bilan de classe (Excel)",
                data=buffer.getvalue(),
                file_name=export_filename(self.class_label),
                mime='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
            )
