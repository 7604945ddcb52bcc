"""AnkiConnect HTTP API client."""

from types import TracebackType
from typing import Any, Literal, cast

import httpx

from obsidian_card_sync.domain.interfaces.anki_client import IAnkiClient
from obsidian_card_sync.error_codes import ErrorCode
from obsidian_card_sync.exceptions import AnkiConnectError
from obsidian_card_sync.utils.logging import get_logger

logger = get_logger(__name__)

ANKI_CONNECT_VERSION = 6


class AnkiClient(IAnkiClient):
    """Async client for the AnkiConnect HTTP API.

    Requests are never retried here: a failed card is picked up again on the
    next run because its stored hash still differs.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize client.

        Args:
            url: AnkiConnect URL
            timeout: Request timeout in seconds
            http_client: Optional preconfigured httpx client (owned by caller)
        """
        self.url = url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=1, max_connections=1),
        )
        logger.debug("anki_client_initialized", url=url)

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        action = payload.get("action")
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            msg = f"Connection error to AnkiConnect: {e}"
            raise AnkiConnectError(
                msg,
                suggestion="Check that Anki is running with the AnkiConnect add-on",
                error_code=ErrorCode.ANK_CONNECTION_FAILED.value,
                context={"url": self.url, "action": action},
            ) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code} from AnkiConnect: {e}"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_HTTP_ERROR.value,
                context={"url": self.url, "action": action},
            ) from e
        except httpx.HTTPError as e:
            msg = f"HTTP error calling AnkiConnect: {e}"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_CONNECTION_FAILED.value,
                context={"url": self.url, "action": action},
            ) from e

        try:
            result = response.json()
        except ValueError as e:
            msg = f"Invalid JSON response: {e}"
            raise AnkiConnectError(
                msg, error_code=ErrorCode.ANK_INVALID_RESPONSE.value
            ) from e

        if not isinstance(result, dict):
            msg = f"Unexpected AnkiConnect response: {result!r}"
            raise AnkiConnectError(msg, error_code=ErrorCode.ANK_INVALID_RESPONSE.value)

        if result.get("error"):
            msg = f"AnkiConnect error: {result['error']}"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_REQUEST_FAILED.value,
                context={"action": action},
            )

        return result

    async def invoke(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """
        Invoke AnkiConnect action.

        Args:
            action: Action name
            params: Action parameters

        Returns:
            Action result

        Raises:
            AnkiConnectError: If the action fails
        """
        payload = {"action": action, "version": ANKI_CONNECT_VERSION, "params": params or {}}
        logger.debug("anki_invoke", action=action)
        result = await self._post(payload)
        return result.get("result")

    async def multi(self, actions: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Run several actions in one request.

        Args:
            actions: Action payloads, each with action/version/params

        Returns:
            Per-action ``{"result": ..., "error": ...}`` dicts
        """
        results = await self.invoke("multi", {"actions": actions})
        if not isinstance(results, list) or len(results) != len(actions):
            msg = f"Unexpected multi result: {results!r}"
            raise AnkiConnectError(msg, error_code=ErrorCode.ANK_INVALID_RESPONSE.value)
        return cast("list[dict[str, Any]]", results)

    async def upsert_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str],
        note_id: int | None = None,
    ) -> int | None:
        """
        Create a note, or update it when ``note_id`` is given.

        Both paths go through a single-action ``multi`` request.

        Returns:
            New note ID for a create, None for an update
        """
        action = "addNote" if note_id is None else "updateNote"
        note = {
            "id": note_id,
            "deckName": deck_name,
            "modelName": model_name,
            "fields": fields,
            "tags": tags,
        }
        results = await self.multi(
            [
                {
                    "action": action,
                    "version": ANKI_CONNECT_VERSION,
                    "params": {"note": note},
                }
            ]
        )

        first = results[0]
        if not isinstance(first, dict):
            msg = f"Unexpected {action} result: {first!r}"
            raise AnkiConnectError(msg, error_code=ErrorCode.ANK_INVALID_RESPONSE.value)
        if first.get("error"):
            msg = f"{action} failed: {first['error']}"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_ACTION_FAILED.value,
                context={"note_id": note_id, "deck": deck_name},
            )

        if action == "updateNote":
            logger.info("note_updated", note_id=note_id, deck=deck_name)
            return None

        new_id = first.get("result")
        if new_id is None:
            msg = "addNote returned no note id"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_MISSING_NOTE_ID.value,
                context={"deck": deck_name},
            )

        numeric = (isinstance(new_id, int) and not isinstance(new_id, bool)) or (
            isinstance(new_id, str) and new_id.isdigit()
        )
        if not numeric:
            msg = f"addNote returned a non-numeric note id: {new_id!r}"
            raise AnkiConnectError(
                msg,
                error_code=ErrorCode.ANK_INVALID_RESPONSE.value,
                context={"deck": deck_name},
            )

        logger.info("note_added", note_id=new_id, deck=deck_name, note_type=model_name)
        return int(new_id)

    async def store_media_file(self, filename: str, data: str) -> str:
        """
        Store a media file in Anki's media collection.

        Sync does not call this yet; referenced media URLs are only reported.

        Args:
            filename: Name of the file to store
            data: Base64-encoded file data

        Returns:
            The filename as stored in Anki (may be modified)
        """
        return cast(
            "str", await self.invoke("storeMediaFile", {"filename": filename, "data": data})
        )

    async def check_connection(self) -> bool:
        """Check if AnkiConnect is accessible."""
        try:
            version = await self.invoke("version")
        except AnkiConnectError as e:
            logger.warning("anki_connection_warning", url=self.url, error=str(e))
            return False
        logger.debug("anki_connection_ok", url=self.url, version=version)
        return True

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
            logger.debug("anki_client_closed", url=self.url)

    async def __aenter__(self) -> "AnkiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        await self.aclose()
        return False
