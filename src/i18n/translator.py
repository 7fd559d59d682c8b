"""
Message translation - JSON catalogs keyed by language tag.

The domain only produces stable keys (reason codes, status keys);
this module turns them into display strings at the API boundary.

Lookup order for translate(key, language):
1. catalog for ``language`` (unsupported languages use the fallback)
2. fallback catalog
3. the key itself
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).parent / "locales"


class Translator:
    """Translates message keys using per-language catalogs."""

    def __init__(self, catalogs: dict[str, dict[str, str]], fallback_language: str = "en") -> None:
        if fallback_language not in catalogs:
            raise ValueError(f"No catalog for fallback language: {fallback_language}")
        self._catalogs = catalogs
        self.fallback_language = fallback_language

    @classmethod
    def from_directory(
        cls, directory: Path = LOCALES_DIR, fallback_language: str = "en"
    ) -> "Translator":
        """Load every ``<lang>.json`` catalog in a directory."""
        catalogs = {
            path.stem.lower(): json.loads(path.read_text(encoding="utf-8"))
            for path in sorted(directory.glob("*.json"))
        }
        logger.debug("Loaded translation catalogs: %s", ", ".join(catalogs))
        return cls(catalogs, fallback_language=fallback_language)

    @property
    def supported_languages(self) -> list[str]:
        return sorted(self._catalogs)

    def negotiate(self, accept_language: str | None) -> str:
        """
        Pick a supported language from an Accept-Language header value.

        Candidates are tried by descending quality; a regional tag such as
        ``es-AR`` also matches its primary language ``es``.
        """
        if not accept_language:
            return self.fallback_language

        candidates: list[tuple[float, str]] = []
        for part in accept_language.split(","):
            tag, _, params = part.strip().partition(";")
            tag = tag.strip().lower()
            if not tag or tag == "*":
                continue
            quality = 1.0
            params = params.strip()
            if params.startswith("q="):
                try:
                    quality = float(params[2:])
                except ValueError:
                    quality = 0.0
            if quality > 0:
                candidates.append((quality, tag))

        # sorted() is stable, so equal qualities keep header order
        for _, tag in sorted(candidates, key=lambda c: c[0], reverse=True):
            if tag in self._catalogs:
                return tag
            primary = tag.split("-", 1)[0]
            if primary in self._catalogs:
                return primary
        return self.fallback_language

    def translate(self, key: str, language: str | None = None) -> str:
        """Return the display string for ``key`` in ``language``."""
        catalog = self._catalogs.get((language or "").lower(), {})
        if key in catalog:
            return catalog[key]
        return self._catalogs[self.fallback_language].get(key, key)
