"""Scallop obligation risk evaluator and liquidator for SUI."""

__version__ = "0.1.0"
