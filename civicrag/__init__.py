"""Civic information assistant: retrieval-augmented answers over legislation and representatives."""

__version__ = "0.1.0"
