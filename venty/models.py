# --- Purpose -------------------------------------------------------------------
# Data shapes shared by the chat screen and the API helpers.
#
# - Message: one bubble in the chat history (user or bot). Frozen, in memory only.
# - ChatRequest: JSON body for `POST /chat`, with the persona/band defaults.
# - ChatResponse / CheckupResponse: what the Venty server sends back. Extra keys
#   are ignored so the server can grow its payload without breaking the app.

import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PERSONA = "default"
BAND_KEYS = ("band1", "band2", "band3", "band4", "band5")


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    sender: Literal["user", "bot"]
    text: str

    @classmethod
    def from_user(cls, text):
        return cls(sender="user", text=text)

    @classmethod
    def from_bot(cls, text):
        return cls(sender="bot", text=text)


class ChatRequest(BaseModel):
    user_message: str
    persona: str = DEFAULT_PERSONA
    band1: str = "default_band1"
    band2: str = "default_band2"
    band3: str = "default_band3"
    band4: str = "default_band4"
    band5: str = "default_band5"

    @classmethod
    def from_prefs(cls, user_message, prefs=None):
        """
        Build a request from a prefs mapping (e.g. the `prefs` config section).

        Missing or empty values keep the field default, so a blank band in the
        settings is sent as "default_bandN" rather than "".
        """
        prefs = prefs or {}
        fields = {"user_message": user_message}
        for key in ("persona",) + BAND_KEYS:
            value = prefs.get(key)
            if value:
                fields[key] = value
        return cls(**fields)


class Sentiment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sentiment_score: Optional[float] = None


class ChatResponse(BaseModel):
    # thread ids arrive as strings or ints depending on the server build
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    bot_reply: str
    sentiment: Optional[Sentiment] = None
    thread_id: Optional[str] = None

    @property
    def sentiment_score(self):
        if self.sentiment is None:
            return None
        return self.sentiment.sentiment_score


class CheckupResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    checkup_message: Optional[str] = None
