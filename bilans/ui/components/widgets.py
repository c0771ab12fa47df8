"""Widgets réutilisables pour l'interface."""

import streamlit as st
from typing import Optional

from bilans.core.mastery import niveau_label
from bilans.core.models import MasteryLevel


class MetricCard:
    """Carte de métrique avec valeur et description."""

    def __init__(
        self,
        label: str,
        value: str,
        delta: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        self.label = label
        self.value = value
        self.delta = delta
        self.help_text = help_text

    def render(self):
        if self.delta:
            st.metric(
                label=self.label,
                value=self.value,
                delta=self.delta,
                help=self.help_text
            )
        else:
            st.metric(
                label=self.label,
                value=self.value,
                help=self.help_text
            )


class NiveauBadge:
    """Badge texte d'un niveau de maîtrise."""

    ICONS = {
        MasteryLevel.TBM: '🟢',
        MasteryLevel.MS: '🔵',
        MasteryLevel.MF: '🟠',
        MasteryLevel.MI: '🔴',
    }

    def __init__(self, niveau: MasteryLevel, with_label: bool = False):
        self.niveau = niveau
        self.with_label = with_label

    def render(self) -> str:
        text = f"{self.ICONS[self.niveau]} {self.niveau.value}"
        if self.with_label:
            text += f" – {niveau_label(self.niveau)}"
        return text
