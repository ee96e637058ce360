"""Crosscutting: configuración, logging, excepciones y paginación."""
