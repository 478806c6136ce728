"""The fixed set of moods a user can pick for Niva."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Mood:
	"""A selectable mood. Colors are only used by the frontend."""

	id: str
	name: str
	description: str
	color: str
	glow_color: str

	def to_dict(self) -> Dict[str, str]:
		return {
			"id": self.id,
			"name": self.name,
			"description": self.description,
			"color": self.color,
			"glow_color": self.glow_color,
		}


MOODS: Tuple[Mood, ...] = (
	Mood("focused", "Focused", "Sharp and analytical precision", "#E5E7EB", "rgba(229, 231, 235, 0.6)"),
	Mood("energetic", "Energetic", "Dynamic silver lightning", "#F3F4F6", "rgba(243, 244, 246, 0.7)"),
	Mood("calm", "Calm", "Peaceful silver serenity", "#D1D5DB", "rgba(209, 213, 219, 0.5)"),
	Mood("creative", "Creative", "Brilliant silver inspiration", "#F9FAFB", "rgba(249, 250, 251, 0.8)"),
	Mood("casual", "Casual", "Relaxed silver comfort", "#E5E7EB", "rgba(229, 231, 235, 0.6)"),
)

DEFAULT_MOOD = MOODS[0]

_BY_ID: Dict[str, Mood] = {mood.id: mood for mood in MOODS}


def get_mood(mood_id: str) -> Mood:
	"""Return the mood with the given id or raise ValueError."""
	mood = _BY_ID.get((mood_id or "").strip().lower())
	if mood is None:
		raise ValueError(f"Unknown mood '{mood_id}'")
	return mood
