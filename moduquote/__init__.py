"""Quotation and invoice builder for modular furniture projects."""

__version__ = '0.1.0'
