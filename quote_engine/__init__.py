"""Quotation pricing & staffing recommendation engine."""

__version__ = "0.1.0"
