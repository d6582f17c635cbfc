"""Helpers to pull text and usage out of chat-completions responses."""

from __future__ import annotations

from typing import Any, Dict, Optional


def extract_message_text(response: Any) -> str:
	"""Return the content of the first choice, or raise if the provider sent none."""
	choices = getattr(response, "choices", None) or []
	if not choices:
		raise RuntimeError("No choices returned by the provider.")
	message = getattr(choices[0], "message", None)
	content = getattr(message, "content", None) if message is not None else None
	if not content:
		raise RuntimeError("Empty message content returned by the provider.")
	return content.strip()


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
	"""Return token usage if present."""
	usage = getattr(response, "usage", None)
	return {
		"input_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
		"output_tokens": getattr(usage, "completion_tokens", None) if usage else None,
	}
