"""Pages de l'application."""
