"""
KindroidAI / AsyncKindroidAI: main SDK clients.
"""

import asyncio
from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from kindroid_ai.crypto import decrypt_fields
from kindroid_ai.errors import (
    AudioNotAvailableError,
    IdentityError,
    KindroidAIError,
    ResponseDecodeError,
)
from kindroid_ai.identity import extract_user_id
from kindroid_ai.models.message import AudioInferenceRequest, ChatMessage, SendMessageOptions
from kindroid_ai.models.subscription import SubscriptionInfo
from kindroid_ai.store import DEFAULT_DATABASE, DEFAULT_PROJECT, ChatStore
from kindroid_ai.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, HttpClient

DEFAULT_HISTORY_LIMIT = 10


class AsyncKindroidAI:
    """Async Kindroid client (primary).

    The user id is taken from the api key when it is a JWT carrying a
    ``user_id`` claim. Otherwise :meth:`setup_user_and_permissions` falls
    back to the subscription endpoint; chat history and audio stay disabled
    on that path because the document store only accepts the JWT.
    """

    def __init__(
        self,
        api_key: str,
        ai_id: str,
        base_url: str = DEFAULT_BASE_URL,
        user_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        store: Optional[ChatStore] = None,
        firestore_project: str = DEFAULT_PROJECT,
        firestore_database: str = DEFAULT_DATABASE,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.ai_id = ai_id
        self._fallback_user_id = user_id
        self._firestore_project = firestore_project
        self._firestore_database = firestore_database
        self._store = store

        self.http = HttpClient(token=api_key, base_url=base_url, transport=transport, timeout=timeout)

        self.user_id: Optional[str] = None
        self.token_auth = False
        self._try_token_identity()

    @property
    def base_url(self) -> str:
        return self.http.base_url

    def _try_token_identity(self) -> bool:
        try:
            self.user_id = extract_user_id(self.api_key)
        except IdentityError as e:
            logger.info("Could not extract user id from api key ({}), token auth disabled", e)
            return False
        self.token_auth = True
        return True

    async def setup_user_and_permissions(self) -> str:
        """Resolve the user id, falling back to the subscription endpoint.

        Sets ``user_id`` and ``token_auth``. Raises :class:`IdentityError` if
        no path yields an id. Do not call concurrently on one client.
        """
        if self.token_auth and self.user_id:
            return self.user_id
        if self._try_token_identity():
            return self.user_id  # type: ignore[return-value]

        self.token_auth = False
        try:
            info = await self.check_user_subscription()
            if not info.uid:
                raise IdentityError("subscription response carried no uid")
        except KindroidAIError as e:
            if self._fallback_user_id:
                logger.info("Subscription lookup failed ({}), using configured user id", e)
                self.user_id = self._fallback_user_id
                return self.user_id
            if isinstance(e, IdentityError):
                raise
            raise IdentityError(f"unable to resolve user id: {e}") from e

        self.user_id = info.uid
        logger.info("Resolved user id {} via subscription lookup", self.user_id)
        return self.user_id

    # --- REST ---

    async def send_message(self, message: str) -> str:
        """Send a message and return the raw response body."""
        return await self.send_message_advanced(SendMessageOptions(ai_id=self.ai_id, message=message))

    async def send_message_advanced(self, options: SendMessageOptions) -> str:
        """Send a message with multimedia/context options; returns the raw body.

        ``options.stream`` is forwarded as-is; the response is read whole.
        """
        return await self.http.post_text("/send-message", options.to_body())

    async def chat_break(self, greeting: str) -> None:
        """End the current chat and start a new one opened by ``greeting``."""
        await self.http.post("/chat-break", {"ai_id": self.ai_id, "greeting": greeting})

    async def check_user_subscription(self) -> SubscriptionInfo:
        """Subscription status of the caller.

        Undocumented endpoint, may change without notice.
        """
        data = await self.http.post_json("/check-user-subscription", {})
        try:
            return SubscriptionInfo.model_validate(data)
        except ValidationError as e:
            raise ResponseDecodeError(f"failed to decode subscription info: {e}") from e

    async def request_audio_inference(self, message_id: str) -> None:
        """Ask the server to generate audio for ``message_id``.

        Undocumented endpoint, may change without notice.
        """
        body = AudioInferenceRequest(ai_id=self.ai_id, message_id=message_id).to_body()
        await self.http.post("/audio-inference", body)

    # --- Document store (token auth only) ---

    def _require_token_auth(self, operation: str) -> str:
        if not self.token_auth or not self.user_id:
            raise IdentityError(
                f"{operation} requires a JWT api key carrying a user_id claim; "
                "subscription-derived identity is not accepted by the chat store"
            )
        return self.user_id

    def _get_store(self) -> ChatStore:
        if self._store is None:
            self._store = ChatStore(
                token=self.api_key,
                project=self._firestore_project,
                database=self._firestore_database,
            )
        return self._store

    def _to_message(self, user_id: str, doc: dict[str, Any]) -> ChatMessage:
        decrypt_fields(doc, user_id)
        return ChatMessage.model_validate(doc)

    async def get_chat_history(self, ai_id: Optional[str] = None,
                               limit: int = DEFAULT_HISTORY_LIMIT) -> list[ChatMessage]:
        """Most recent messages, newest first, decrypted.

        Documents that do not parse are skipped with a warning.
        """
        user_id = self._require_token_auth("chat history")
        docs = await self._get_store().list_messages(user_id, ai_id or self.ai_id, limit)

        messages = []
        for doc in docs:
            try:
                messages.append(self._to_message(user_id, doc))
            except ValidationError as e:
                logger.warning("Failed to parse chat message document {}: {}", doc.get("id"), e)
        return messages

    async def get_chat_message(self, message_id: str, ai_id: Optional[str] = None) -> Optional[ChatMessage]:
        user_id = self._require_token_auth("chat message lookup")
        doc = await self._get_store().get_message(user_id, ai_id or self.ai_id, message_id)
        if doc is None:
            return None
        try:
            return self._to_message(user_id, doc)
        except ValidationError as e:
            raise ResponseDecodeError(f"failed to parse chat message {message_id}: {e}") from e

    async def audio_inference(self, message_id: str) -> bytes:
        """Return the audio for a message, generating it first if missing.

        At most one inference request and one re-lookup; no polling.
        """
        self._require_token_auth("audio inference")
        msg = await self.get_chat_message(message_id)
        if msg is None or not msg.has_audio:
            logger.debug("No audio for message {}, requesting inference", message_id)
            await self.request_audio_inference(message_id)
            msg = await self.get_chat_message(message_id)
            if msg is None or not msg.has_audio:
                raise AudioNotAvailableError(message_id)
        return await self.http.get_bytes(msg.audio_url)  # type: ignore[arg-type]

    async def close(self) -> None:
        await self.http.close()
        if self._store is not None:
            await self._store.close()

    async def __aenter__(self) -> "AsyncKindroidAI":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


class KindroidAI:
    """Sync wrapper around AsyncKindroidAI. Runs the event loop internally."""

    def __init__(self, api_key: str, ai_id: str, **kwargs: Any):
        self._async = AsyncKindroidAI(api_key, ai_id, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def api_key(self) -> str:
        return self._async.api_key

    @property
    def ai_id(self) -> str:
        return self._async.ai_id

    @property
    def base_url(self) -> str:
        return self._async.base_url

    @property
    def user_id(self) -> Optional[str]:
        return self._async.user_id

    @property
    def token_auth(self) -> bool:
        return self._async.token_auth

    def setup_user_and_permissions(self) -> str:
        return self._run(self._async.setup_user_and_permissions())

    def send_message(self, message: str) -> str:
        return self._run(self._async.send_message(message))

    def send_message_advanced(self, options: SendMessageOptions) -> str:
        return self._run(self._async.send_message_advanced(options))

    def chat_break(self, greeting: str) -> None:
        self._run(self._async.chat_break(greeting))

    def check_user_subscription(self) -> SubscriptionInfo:
        return self._run(self._async.check_user_subscription())

    def request_audio_inference(self, message_id: str) -> None:
        self._run(self._async.request_audio_inference(message_id))

    def get_chat_history(self, ai_id: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> list[ChatMessage]:
        return self._run(self._async.get_chat_history(ai_id, limit))

    def get_chat_message(self, message_id: str, ai_id: Optional[str] = None) -> Optional[ChatMessage]:
        return self._run(self._async.get_chat_message(message_id, ai_id))

    def audio_inference(self, message_id: str) -> bytes:
        return self._run(self._async.audio_inference(message_id))

    def close(self) -> None:
        try:
            self._run(self._async.close())
        finally:
            self._loop.close()

    def __enter__(self) -> "KindroidAI":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
