from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from campus_chatbot.config import Config

class SaveUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

class LogInteractionRequest(BaseModel):
    user_email: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_email", "userEmail")
    )
    interaction_type: str = Field(
        default="general",
        validation_alias=AliasChoices("interaction_type", "interactionType"),
    )
    option_selected: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("option_selected", "optionSelected")
    )
    user_message: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_message", "userMessage")
    )
    bot_response: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("bot_response", "botResponse")
    )
    session_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("session_id", "sessionId")
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("interaction_type", mode="before")
    @classmethod
    def _coerce_interaction_type(cls, value) -> str:
        kind = str(value or "").strip().lower()
        if kind not in Config.INTERACTION_TYPES:
            return "general"
        return kind

    @field_validator("option_selected", "session_id", mode="before")
    @classmethod
    def _stringify(cls, value):
        # option ids may arrive as numbers from older widget builds
        if value is None:
            return None
        return str(value)

class AdminLoginRequest(BaseModel):
    password: str
