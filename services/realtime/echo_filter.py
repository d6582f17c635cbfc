"""Detect the avatar's own speech transcribed back as user input."""

from __future__ import annotations

from models.session_models import EchoGuard

MAX_USER_UTTERANCE_CHARS = 200
MIN_PREFIX_CHARS = 30
COMPARE_CHARS = 80
MATCH_THRESHOLD = 0.7


def prefix_match_ratio(a: str, b: str, length: int = COMPARE_CHARS) -> float:
	"""Fraction of equal positions over the first `length` chars, ignoring case."""
	left = a[:length].lower()
	right = b[:length].lower()
	compared = min(len(left), len(right))
	if compared == 0:
		return 0.0
	matches = sum(1 for index in range(compared) if left[index] == right[index])
	return matches / compared


class EchoFilter:
	"""Classify an utterance as echo when it is too long or mirrors the last response."""

	def __init__(
		self,
		max_chars: int = MAX_USER_UTTERANCE_CHARS,
		min_prefix_chars: int = MIN_PREFIX_CHARS,
		compare_chars: int = COMPARE_CHARS,
		threshold: float = MATCH_THRESHOLD,
	) -> None:
		self.max_chars = max_chars
		self.min_prefix_chars = min_prefix_chars
		self.compare_chars = compare_chars
		self.threshold = threshold

	def is_echo(self, utterance: str, guard: EchoGuard) -> bool:
		text = utterance or ""
		if len(text) > self.max_chars:
			return True
		prefix = guard.last_response_prefix if guard else ""
		if len(prefix) < self.min_prefix_chars or len(text) < self.min_prefix_chars:
			return False
		return prefix_match_ratio(prefix, text, self.compare_chars) > self.threshold
