"""Taxon distribution ranges over an isolatitude pixelation."""

__version__ = "0.1.0"
