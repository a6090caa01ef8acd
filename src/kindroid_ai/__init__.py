"""
kindroid-ai: Kindroid AI SDK for Python.

REST client for the Kindroid API plus encrypted chat history from its
Firestore store.
"""

from kindroid_ai.client import KindroidAI, AsyncKindroidAI
from kindroid_ai.errors import (
    KindroidAIError,
    TransportError,
    HttpError,
    ResponseDecodeError,
    IdentityError,
    StoreError,
    DecryptionError,
    AudioNotAvailableError,
)
from kindroid_ai.models.message import ChatMessage, SendMessageOptions, AudioInferenceRequest
from kindroid_ai.models.subscription import SubscriptionInfo

__version__ = "0.1.0"
__all__ = [
    "KindroidAI",
    "AsyncKindroidAI",
    "KindroidAIError",
    "TransportError",
    "HttpError",
    "ResponseDecodeError",
    "IdentityError",
    "StoreError",
    "DecryptionError",
    "AudioNotAvailableError",
    "ChatMessage",
    "SendMessageOptions",
    "AudioInferenceRequest",
    "SubscriptionInfo",
]
