"""Brandmeister last-heard ingestion and statistics service."""

__version__ = "1.0.0"
