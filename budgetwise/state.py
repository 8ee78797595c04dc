"""Immutable UI state for the forum and assistant pages."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, FrozenSet, Hashable, Tuple

SENDER_USER = 'user'
SENDER_BOT = 'bot'

GREETING = "Hello 👋, I'm your AI Finance Assistant. How can I help you today?"
CHAT_ERROR = "❌ Error connecting to AI service."


def mark_liked(liked: FrozenSet[Hashable], post_id: Hashable) -> FrozenSet[Hashable]:
    """Return a new set of liked posts that includes ``post_id``."""
    if post_id in liked:
        return liked
    return frozenset(liked | {post_id})


def can_like(liked: FrozenSet[Hashable], post_id: Hashable) -> bool:
    return post_id not in liked


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    text: str

    @property
    def from_user(self) -> bool:
        return self.sender == SENDER_USER


@dataclass(frozen=True)
class ChatTranscript:
    """Chat history plus whether a reply is pending.

    Every transition returns a new transcript; a pending user message is
    answered by exactly one bot reply or error.
    """

    messages: Tuple[ChatMessage, ...] = (ChatMessage(SENDER_BOT, GREETING),)
    awaiting_reply: bool = False

    def with_user_message(self, text: str) -> 'ChatTranscript':
        text = (text or '').strip()
        if not text or self.awaiting_reply:
            return self
        return replace(
            self,
            messages=self.messages + (ChatMessage(SENDER_USER, text),),
            awaiting_reply=True,
        )

    def with_bot_reply(self, text: Any) -> 'ChatTranscript':
        if not self.awaiting_reply:
            return self
        return replace(
            self,
            messages=self.messages + (ChatMessage(SENDER_BOT, str(text or '')),),
            awaiting_reply=False,
        )

    def with_error(self, text: str = CHAT_ERROR) -> 'ChatTranscript':
        return self.with_bot_reply(text)

    @property
    def last_user_message(self) -> str:
        for message in reversed(self.messages):
            if message.from_user:
                return message.text
        return ''
