"""Composants réutilisables (graphiques, tableaux, widgets)."""
