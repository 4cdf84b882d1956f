"""Core backend infrastructure for the ingestion service.

This package contains configuration, logging, database, error taxonomy and
dependency helpers used by the FastAPI application and the job CLI.
"""
