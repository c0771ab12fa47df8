"""UI module - Interface Streamlit."""

from bilans.ui.components.charts import BarChart, BoxPlotChart, DonutChart, RadarChart
from bilans.ui.components.tables import DataTable, ResultsTable
from bilans.ui.components.widgets import MetricCard, NiveauBadge

__all__ = [
    "BarChart",
    "BoxPlotChart",
    "DonutChart",
    "RadarChart",
    "DataTable",
    "ResultsTable",
    "MetricCard",
    "NiveauBadge",
]
