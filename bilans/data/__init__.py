"""Data module - Import, sauvegarde et export des données."""

from bilans.data.loaders import (
    BilansImportError,
    Corrections,
    CorrectionsFormatError,
    CorrectionsLoader,
    DataLoader,
    RosterColumnsError,
    RosterFormatError,
    RosterLoader,
)
from bilans.data.store import LocalStore
from bilans.data.exporters import export_class_excel, export_results_csv

__all__ = [
    "BilansImportError",
    "Corrections",
    "CorrectionsFormatError",
    "CorrectionsLoader",
    "DataLoader",
    "RosterColumnsError",
    "RosterFormatError",
    "RosterLoader",
    "LocalStore",
    "export_class_excel",
    "export_results_csv",
]
