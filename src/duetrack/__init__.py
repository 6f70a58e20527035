"""duetrack: personal task tracker with a 24h due-soon reminder view."""

__version__ = "0.1.0"
