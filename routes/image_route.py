"""FastAPI routes for image generation and retrieval."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from controllers.image_controller import generate_image, get_image

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/image", tags=["image"])


class ImageGenerationPayload(BaseModel):
	prompt: str


@router.post("/generate")
async def generate_image_route(request: Request, payload: ImageGenerationPayload):
	"""Generate an image for the prompt and return the stored record."""
	try:
		return await generate_image(request, payload.prompt)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Image generation request failed")
		raise HTTPException(status_code=500, detail="Internal Server Error") from exc


@router.get("/{image_id}")
async def get_image_route(request: Request, image_id: str):
	"""Return the stored record for `image_id`, or an empty 404."""
	try:
		body = await get_image(request, image_id)
	except Exception as exc:
		LOGGER.exception("Image retrieval failed for %s", image_id)
		raise HTTPException(status_code=500, detail="Internal Server Error") from exc

	if body is None:
		return Response(status_code=404)
	return body
