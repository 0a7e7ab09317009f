"""Esports match ingestion, entity resolution and fantasy scoring."""

__version__ = "1.0.0"
