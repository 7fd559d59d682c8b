"""Localization - message catalogs and language negotiation."""

from .translator import LOCALES_DIR, Translator

__all__ = ["LOCALES_DIR", "Translator"]
