"""Compliance rule evaluation and surveillance risk scoring for laboratory operations."""

__version__ = "0.1.0"
