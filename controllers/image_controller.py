from fastapi import Request, HTTPException
from typing import Dict, Optional
import logging
import uuid

from models.image_record import ImageRecord
from services.interfaces import (
    ImageGeneratorProtocol,
    ImageMetadataStoreProtocol,
    ImageStoreProtocol,
)
from services.openai.image_generator import ImageGenerationError
from services.openai.image_prompts import build_detailed_prompt

LOGGER = logging.getLogger(__name__)


async def generate_image(request: Request, prompt: str) -> Dict[str, str]:
    """Generate an image for `prompt`, copy it into owned storage and persist its record.

    Args:
        request: FastAPI Request object (used to access app.state for shared adapters).
        prompt: Prompt as submitted by the caller.

    Returns:
        A dict containing: id, imageUri, detailedPrompt, originalPrompt

    Raises:
        HTTPException(400) if the generation service failed or did not return
        exactly one image. Storage failures propagate unchanged; in that case
        an uploaded blob may be left without a metadata record.
    """
    generator: ImageGeneratorProtocol = request.app.state.image_generator
    image_store: ImageStoreProtocol = request.app.state.image_store
    image_dal: ImageMetadataStoreProtocol = request.app.state.image_dal

    detailed_prompt = build_detailed_prompt(prompt)

    try:
        source_url = await generator.generate(detailed_prompt)
    except ImageGenerationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    image_id = str(uuid.uuid4())
    image_uri = await image_store.upload(image_id, source_url)

    record = ImageRecord(
        id=image_id,
        image_uri=image_uri,
        detailed_prompt=detailed_prompt,
        original_prompt=prompt,
    )
    await image_dal.upsert(record)

    LOGGER.info("Stored generated image %s at %s", image_id, image_uri)
    return record.to_response()


async def get_image(request: Request, image_id: str) -> Optional[Dict[str, str]]:
    """Controller to fetch a previously generated image record.

    Args:
        request: FastAPI Request (to access app.state.image_dal).
        image_id: Identifier returned by `generate_image`.

    Returns:
        The record body, or None when no record exists for `image_id`.
    """
    image_dal: ImageMetadataStoreProtocol = request.app.state.image_dal

    record = await image_dal.get(image_id)
    if record is None:
        return None
    return record.to_response()
