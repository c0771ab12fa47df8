"""Bilans DNB Blanc - notes, compétences et statistiques de classe."""

__version__ = "0.1.0"
