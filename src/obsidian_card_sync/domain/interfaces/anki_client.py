"""Interface for Anki client operations."""

from abc import ABC, abstractmethod
from typing import Any


class IAnkiClient(ABC):
    """Interface for the remote flashcard store.

    This interface defines the contract for communicating with Anki
    through the AnkiConnect API.
    """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Check if AnkiConnect is available and responsive.

        Returns:
            True if connection is successful, False otherwise
        """
        pass

    @abstractmethod
    async def upsert_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str],
        note_id: int | None = None,
    ) -> int | None:
        """Create a note, or update it when ``note_id`` is given.

        Args:
            deck_name: Target deck
            model_name: Note type name
            fields: Field values (rendered HTML)
            tags: Tags applied to the note
            note_id: Existing note ID for updates

        Returns:
            The new note ID for a create, None for an update

        Raises:
            AnkiConnectError: If the request or the action fails
        """
        pass

    @abstractmethod
    async def invoke(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """Invoke a raw AnkiConnect action and return its result."""
        pass
