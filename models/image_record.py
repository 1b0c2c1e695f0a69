from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class ImageRecord:
    """In-memory representation of a row in the images table.

    Attributes:
        id: Identifier assigned when the image was generated. Used as both the
            partition key and the row key of the stored entity.
        image_uri: Absolute URI of the image in owned storage.
        detailed_prompt: Prompt actually sent to the generation service.
        original_prompt: Prompt as submitted by the caller.
    """

    id: str
    image_uri: str
    detailed_prompt: str
    original_prompt: str

    def to_response(self) -> Dict[str, str]:
        """Return the JSON body served by the image endpoints."""
        return {
            "id": self.id,
            "imageUri": self.image_uri,
            "detailedPrompt": self.detailed_prompt,
            "originalPrompt": self.original_prompt,
        }

    def to_entity(self) -> Dict[str, str]:
        """Return the table entity keyed by (id, id)."""
        return {
            "PartitionKey": self.id,
            "RowKey": self.id,
            "ImageUri": self.image_uri,
            "DetailedPrompt": self.detailed_prompt,
            "OriginalPrompt": self.original_prompt,
        }

    @classmethod
    def from_entity(cls, entity: Mapping[str, Any]) -> "ImageRecord":
        """Build a record from a stored table entity."""
        return cls(
            id=str(entity["RowKey"]),
            image_uri=str(entity["ImageUri"]),
            detailed_prompt=str(entity["DetailedPrompt"]),
            original_prompt=str(entity["OriginalPrompt"]),
        )
