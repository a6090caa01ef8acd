"""
Firestore-backed chat message store.

Messages live under ``Users/{user_id}/AIs/{ai_id}/ChatMessages``. The store
authenticates with the api key as a static bearer token.
"""

from typing import Any, Optional

from google.api_core import exceptions as gexc
from google.cloud import firestore
from google.oauth2.credentials import Credentials
from loguru import logger

from kindroid_ai.errors import StoreError

DEFAULT_PROJECT = "kindroid-ai"
DEFAULT_DATABASE = "(default)"
TIMESTAMP_FIELD = "timestamp"


def messages_path(user_id: str, ai_id: str) -> str:
    return f"Users/{user_id}/AIs/{ai_id}/ChatMessages"


class ChatStore:
    def __init__(
        self,
        token: str,
        project: str = DEFAULT_PROJECT,
        database: str = DEFAULT_DATABASE,
        client: Optional[Any] = None,
    ):
        self._project = project
        self._database = database
        self._client = client or firestore.AsyncClient(
            project=project,
            database=database,
            credentials=Credentials(token=token),
        )

    async def list_messages(self, user_id: str, ai_id: str, limit: int) -> list[dict[str, Any]]:
        """Newest first. Each dict carries the document id under ``id``."""
        query = (
            self._client.collection(messages_path(user_id, ai_id))
            .order_by(TIMESTAMP_FIELD, direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        docs: list[dict[str, Any]] = []
        try:
            async for snap in query.stream():
                data = snap.to_dict() or {}
                data["id"] = snap.id
                docs.append(data)
        except gexc.GoogleAPIError as e:
            raise StoreError(f"failed to retrieve documents: {e}") from e
        logger.debug("Fetched {} chat documents for ai {}", len(docs), ai_id)
        return docs

    async def get_message(self, user_id: str, ai_id: str, message_id: str) -> Optional[dict[str, Any]]:
        ref = self._client.collection(messages_path(user_id, ai_id)).document(message_id)
        try:
            snap = await ref.get()
        except gexc.GoogleAPIError as e:
            raise StoreError(f"failed to retrieve message {message_id}: {e}",
                             {"message_id": message_id}) from e
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        data["id"] = snap.id
        return data

    async def close(self) -> None:
        await self._client.close()
