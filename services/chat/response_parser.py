"""Helpers to extract text from Responses API output."""

from __future__ import annotations

from typing import Any


def _field(obj: Any, name: str, default: Any = None) -> Any:
	if isinstance(obj, dict):
		return obj.get(name, default)
	return getattr(obj, name, default)


def extract_text(response: Any) -> str:
	"""Return the aggregated output text, falling back to the first output_text entry."""
	text = _field(response, "output_text")
	if isinstance(text, str) and text:
		return text
	for item in _field(response, "output", None) or []:
		if _field(item, "type") != "message":
			continue
		for content in _field(item, "content", None) or []:
			if _field(content, "type") == "output_text":
				return _field(content, "text", "") or ""
	return ""
