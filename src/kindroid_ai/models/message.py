"""
Message models: /send-message, /audio-inference and stored chat messages.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from kindroid_ai.crypto import DECRYPTION_FAILED


class SendMessageOptions(BaseModel):
    """POST /send-message body. Unset optional fields are omitted, never null."""
    ai_id: str
    message: str
    stream: Optional[bool] = None  # pass-through flag; the body is always read whole
    image_urls: Optional[list[str]] = None
    image_description: Optional[str] = None
    video_url: Optional[str] = None
    video_description: Optional[str] = None
    internet_response: Optional[str] = None
    link_url: Optional[str] = None
    link_description: Optional[str] = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AudioInferenceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_id: str
    message_id: str = Field(alias="messageID")

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ChatMessage(BaseModel):
    """A document from Users/{uid}/AIs/{ai}/ChatMessages, already decrypted."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    sender: str = ""
    timestamp: Any = None  # Firestore timestamp or epoch millis
    message: str = ""
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_url) and self.audio_url != DECRYPTION_FAILED

    def get_time(self) -> Optional[datetime]:
        ts = self.timestamp
        if ts is None:
            return None
        if isinstance(ts, datetime):
            return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
        if isinstance(ts, (int, float)):
            return datetime.fromtimestamp(ts / 1000, tz=timezone.utc)
        return None
