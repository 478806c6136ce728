from fastapi import APIRouter

from models.moods import MOODS

router = APIRouter()


@router.get("/moods")
async def list_moods():
	"""Return the fixed set of selectable moods."""
	return {"moods": [mood.to_dict() for mood in MOODS]}
