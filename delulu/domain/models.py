"""Value types for notes, cursors and the chat-completion wire contract."""
from dataclasses import dataclass, replace
from typing import List, Literal

from pydantic import BaseModel, Field

Role = Literal["system", "user", "assistant"]
SortKey = Literal["ctime", "mtime"]


@dataclass(frozen=True)
class NoteFile:
    """Handle to one Markdown document in the vault. Timestamps are epoch milliseconds."""
    path: str
    basename: str
    ctime: int
    mtime: int


@dataclass(frozen=True)
class RecentNote:
    title: str
    ctime: int
    mtime: int
    content: str | None = None

    def with_content(self, content: str | None) -> "RecentNote":
        return replace(self, content=content)


@dataclass(frozen=True)
class Cursor:
    line: int
    ch: int

    def shifted(self, by: int) -> "Cursor":
        return Cursor(self.line, self.ch + by)


class ChatMessage(BaseModel):
    role: Role
    content: str


class ChatCompletionRequest(BaseModel):
    """Body POSTed to the chat-completion endpoint."""
    model: str
    messages: List[ChatMessage]


class ResponseMessage(BaseModel):
    content: str


class Choice(BaseModel):
    message: ResponseMessage


class ChatCompletionResponse(BaseModel):
    """The only part of the endpoint's answer we rely on."""
    choices: List[Choice] = Field(..., min_length=1)
