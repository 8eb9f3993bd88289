"""Application package for the personal finance backend.

This package holds the data models, the SQLite persistence layer with its
file-based migration runner, and the FastAPI application. Individual
modules contain the concrete implementations and documentation.
"""
