"""Wake-phrase gate for recognized speech."""

from __future__ import annotations

import re
from typing import Optional

WAKE_PHRASE = "hey niva"

_WAKE_RE = re.compile(re.escape(WAKE_PHRASE), re.IGNORECASE)


def gate_transcript(transcript: str, always_listening: bool) -> Optional[str]:
	"""Return the command text to forward, or None when the transcript is ignored.

	In always-listening mode every non-empty transcript passes through verbatim.
	Otherwise the transcript must contain the wake phrase, which is removed
	before the remaining text is returned.
	"""
	text = (transcript or "").strip()
	if not text:
		return None
	if always_listening:
		return text
	if WAKE_PHRASE not in text.lower():
		return None
	command = " ".join(_WAKE_RE.sub("", text, count=1).split()).lstrip(",.!:;- ")
	return command or None
