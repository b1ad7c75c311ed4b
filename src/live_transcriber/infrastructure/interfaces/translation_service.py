"""Abstract interface for text translation."""

from abc import ABC, abstractmethod


class TranslationService(ABC):
    """Abstract base class for translation backends."""

    @abstractmethod
    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> str:
        """
        Translates text between two languages.

        Raises:
            TranslationError: If the translation call fails.
        """

    @abstractmethod
    async def close(self) -> None:
        """Releases the underlying client. Safe to call more than once."""
