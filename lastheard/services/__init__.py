"""Ingestion, aggregation and maintenance services."""
