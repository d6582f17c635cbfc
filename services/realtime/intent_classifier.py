"""Decide whether an utterance asks about what the camera sees."""

from __future__ import annotations

from typing import Iterable, Protocol

from utils.settings import DEFAULT_VISUAL_KEYWORDS


class IntentClassifier(Protocol):
	def is_visual_query(self, utterance: str) -> bool:
		...


class KeywordIntentClassifier:
	"""Case-insensitive substring match against a configurable keyword set."""

	def __init__(self, keywords: Iterable[str] = DEFAULT_VISUAL_KEYWORDS) -> None:
		self.keywords = tuple(keyword.lower() for keyword in keywords if keyword)

	def is_visual_query(self, utterance: str) -> bool:
		text = (utterance or "").lower()
		if not text:
			return False
		return any(keyword in text for keyword in self.keywords)
