"""Composants graphiques avec Plotly."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import streamlit as st
import plotly.graph_objects as go

from bilans.core.models import MasteryLevel
from bilans.core.statistics import SCORE_SCALE, CohortSummary, NO_DATA


NIVEAU_COLORS: Dict[MasteryLevel, str] = {
    MasteryLevel.TBM: "#10b981",
    MasteryLevel.MS: "#3b82f6",
    MasteryLevel.MF: "#f59e0b",
    MasteryLevel.MI: "#ef4444",
}


def success_rate_color(rate: float) -> str:
    """Couleur d'une barre de taux de réussite."""
    if rate >= 70:
        return "#10b981"
    if rate >= 50:
        return "#3b82f6"
    if rate >= 30:
        return "#f59e0b"
    return "#ef4444"


def histogram_color(index: int) -> str:
    """Couleur d'une tranche de 2 points (0-4 rouge, 4-10 orange, 10-14 bleu, 14-20 vert)."""
    if index < 2:
        return "#ef4444"
    if index < 5:
        return "#f59e0b"
    if index < 7:
        return "#3b82f6"
    return "#10b981"


class ChartComponent(ABC):
    """Classe de base pour les graphiques."""

    @abstractmethod
    def figure(self) -> go.Figure:
        pass

    def render(self):
        st.plotly_chart(self.figure(), use_container_width=True)


class BarChart(ChartComponent):
    """Graphique en barres."""

    def __init__(
        self,
        labels: List[str],
        values: List[float],
        title: str = "",
        x_label: str = "",
        y_label: str = "",
        colors: Optional[List[str]] = None,
        y_max: Optional[float] = None,
        y_suffix: str = ""
    ):
        self.labels = labels
        self.values = values
        self.title = title
        self.x_label = x_label
        self.y_label = y_label
        self.colors = colors or ["#4C8BF5"] * len(values)
        self.y_max = y_max
        self.y_suffix = y_suffix

    def figure(self) -> go.Figure:
        fig = go.Figure(go.Bar(
            x=self.labels,
            y=self.values,
            marker_color=self.colors,
        ))

        yaxis = dict(title=self.y_label, ticksuffix=self.y_suffix, rangemode="tozero")
        if self.y_max is not None:
            yaxis["range"] = [0, self.y_max]

        fig.update_layout(
            title=self.title,
            xaxis_title=self.x_label,
            yaxis=yaxis,
            showlegend=False
        )
        return fig


class DonutChart(ChartComponent):
    """Répartition des niveaux de maîtrise."""

    def __init__(self, counts: Dict[MasteryLevel, int], labels: Dict[MasteryLevel, str], title: str = ""):
        self.counts = counts
        self.labels = labels
        self.title = title

    def figure(self) -> go.Figure:
        levels = list(self.counts)
        fig = go.Figure(go.Pie(
            labels=[self.labels.get(level, level.value) for level in levels],
            values=[self.counts[level] for level in levels],
            marker=dict(colors=[NIVEAU_COLORS[level] for level in levels]),
            hole=0.6,
            sort=False,
        ))
        fig.update_layout(title=self.title)
        return fig


class BoxPlotChart(ChartComponent):
    """Boîte à moustaches construite à partir des statistiques déjà calculées."""

    def __init__(self, summary: CohortSummary, title: str = ""):
        self.summary = summary
        self.title = title

    def figure(self) -> go.Figure:
        fig = go.Figure()
        s = self.summary

        if s.count and s.mean != NO_DATA:
            fig.add_trace(go.Box(
                q1=[s.q1],
                median=[s.median],
                q3=[s.q3],
                lowerfence=[s.minimum],
                upperfence=[s.maximum],
                mean=[s.mean],
                orientation="h",
                name="Notes",
                marker_color="#3b82f6",
            ))

        fig.update_layout(
            title=self.title,
            xaxis=dict(range=[0, SCORE_SCALE], title="Note sur 20"),
            showlegend=False
        )
        return fig


class RadarChart(ChartComponent):
    """Graphique radar des compétences."""

    def __init__(
        self,
        categories: List[str],
        values: List[float],
        title: str = "",
        fill: bool = True
    ):
        self.categories = categories
        self.values = values
        self.title = title
        self.fill = fill

    def figure(self) -> go.Figure:
        fig = go.Figure()

        if self.categories:
            fig.add_trace(go.Scatterpolar(
                r=self.values + [self.values[0]],  # Fermer le polygone
                theta=self.categories + [self.categories[0]],
                fill='toself' if self.fill else None,
                name='Score'
            ))

        fig.update_layout(
            polar=dict(radialaxis=dict(visible=True, range=[0, 100])),
            showlegend=False,
            title=self.title
        )
        return fig
