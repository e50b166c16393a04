# backend/mednote/models/requests.py

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .consultation import ChatContext, ChatMessage


class DiagnoseRequest(BaseModel):
    transcript: str = ""


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    context: Optional[ChatContext] = None
    chat_history: List[ChatMessage] = Field(default_factory=list, alias="chatHistory")
