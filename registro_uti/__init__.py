"""Registro UTI: ICU scoring records and the clinical scoring engine."""

__version__ = "0.1.0"
