"""Composants de tableaux de données."""

import streamlit as st
import pandas as pd
from typing import Optional

from bilans.core.models import MasteryLevel
from bilans.ui.components.charts import NIVEAU_COLORS


class DataTable:
    """Tableau de données configurable."""

    def __init__(
        self,
        data: pd.DataFrame,
        title: Optional[str] = None,
        height: int = 400,
        use_container_width: bool = True
    ):
        self.data = data
        self.title = title
        self.height = height
        self.use_container_width = use_container_width

    def render(self):
        if self.title:
            st.subheader(self.title)

        st.dataframe(
            self.data,
            use_container_width=self.use_container_width,
            height=self.height
        )


def niveau_style(value) -> str:
    """Style CSS d'une cellule de niveau (TBM, MS, MF, MI)."""
    try:
        level = MasteryLevel(value)
    except ValueError:
        return ''
    return f'background-color: {NIVEAU_COLORS[level]}; color: white; font-weight: 600'


class ResultsTable:
    """Tableau des résultats avec niveaux colorés."""

    DISPLAY_COLUMNS = {
        'numero': 'N°',
        'nom': 'Nom',
        'prenom': 'Prénom',
        'classe': 'Classe',
        'note_affichee': 'Note /20',
        'niveau': 'Niveau',
    }

    def __init__(self, data: pd.DataFrame, title: str = "Résultats"):
        self.data = data
        self.title = title

    def display_frame(self) -> pd.DataFrame:
        return self.data[list(self.DISPLAY_COLUMNS)].rename(columns=self.DISPLAY_COLUMNS)

    def render(self):
        if self.data.empty:
            st.info("Aucun candidat corrigé pour cette sélection")
            return

        st.subheader(self.title)
        styled = self.display_frame().style.map(niveau_style, subset=['Niveau'])
        st.dataframe(styled, use_container_width=True, hide_index=True)
