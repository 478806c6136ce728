"""Prompt helpers that wrap user messages in Niva's persona."""

from __future__ import annotations

from models.moods import DEFAULT_MOOD
from models.session_models import SessionContext

PERSONA_PREAMBLE = (
	"You are Niva, a 17-year-old CS student and AI bestie with a sweet, helpful, charming, "
	"and slightly playful personality.\n"
	"You speak with a sweet Indian female tone. Keep responses concise but friendly."
)

PERSONA_REMINDERS = (
	"Remember to respond as Niva with her personality:\n"
	"- Be helpful, charming, and slightly playful\n"
	"- Use casual, friendly language\n"
	"- Keep responses concise but engaging\n"
	"- Add emojis occasionally to show personality\n"
	"- Be knowledgeable about CS topics since you're a CS student\n"
	"- Show empathy and understanding"
)

SMALL_TALK_BLOCK = (
	"User has enabled Small Talk mode. In this mode:\n"
	"- Be more conversational and casual\n"
	"- Feel free to suggest music or discuss light topics\n"
	"- You can be more creative and playful\n"
	"- Share personal thoughts or experiences as Niva\n"
	"- Suggest music based on mood or user preferences if mentioned"
)


def build_prompt(
	user_text: str,
	*,
	mood_name: str = "",
	current_time: str = "",
	weather: str = "",
	small_talk_mode: bool = False,
) -> str:
	"""Return the full prompt for a single user message.

	Empty time or weather values drop their context line entirely; a missing
	mood name falls back to the default mood.
	"""
	context_lines = [f"Current mood: {mood_name or DEFAULT_MOOD.name}"]
	if current_time:
		context_lines.append(f"Current time: {current_time}")
	if weather:
		context_lines.append(f"Current weather: {weather}")

	sections = [
		PERSONA_PREAMBLE,
		"\n".join(context_lines),
		f"User message: {user_text}",
		PERSONA_REMINDERS,
	]
	if small_talk_mode:
		sections.append(SMALL_TALK_BLOCK)
	return "\n\n".join(sections)


def compose(context: SessionContext, user_text: str) -> str:
	"""Return the prompt for `user_text` under the given session context."""
	return build_prompt(
		user_text,
		mood_name=context.mood.name,
		current_time=context.current_time,
		weather=context.weather,
		small_talk_mode=context.small_talk_mode,
	)
