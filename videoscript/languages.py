"""Supported transcription languages and the auto-detect sentinel."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

AUTO_DETECT = "auto"


@dataclass(frozen=True)
class Language:
    """A selectable transcription language."""
    code: str
    name: str
    native_name: str


SUPPORTED_LANGUAGES: List[Language] = [
    Language("en", "English", "English"),
    Language("fr", "French", "Français"),
    Language("ar", "Arabic", "العربية"),
    Language("es", "Spanish", "Español"),
    Language("de", "German", "Deutsch"),
    Language("it", "Italian", "Italiano"),
    Language("pt", "Portuguese", "Português"),
    Language("ru", "Russian", "Русский"),
    Language("zh", "Chinese", "中文"),
    Language("ja", "Japanese", "日本語"),
]


class LanguageCatalog:
    """Lookup over the supported languages."""

    def __init__(self,
                 languages: Optional[List[Language]] = None,
                 fallback: str = "English"):
        """Initialize catalog.

        Args:
            languages: Selectable languages (defaults to SUPPORTED_LANGUAGES)
            fallback: Language name reported when auto-detection yields nothing
        """
        self.languages = list(languages or SUPPORTED_LANGUAGES)
        self.fallback = fallback
        self._by_code: Dict[str, Language] = {lang.code: lang for lang in self.languages}

    def is_supported(self, code: str) -> bool:
        return code == AUTO_DETECT or code in self._by_code

    def get(self, code: str) -> Optional[Language]:
        return self._by_code.get(code)

    def display_name(self, code: str) -> str:
        """Catalog name for a code; unknown codes are returned verbatim."""
        language = self._by_code.get(code)
        return language.name if language else code

    def resolve(self, selection: str, detected: Optional[str] = None) -> str:
        """Language name to report on a transcription result.

        Args:
            selection: Selected code or the "auto" sentinel
            detected: Language the backend detected, if any

        Returns:
            Display name; never the sentinel itself
        """
        if selection != AUTO_DETECT:
            return self.display_name(selection)
        if detected:
            return self.display_name(detected)
        logger.debug(f"No language detected, falling back to {self.fallback}")
        return self.fallback
