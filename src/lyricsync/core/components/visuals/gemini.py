"""Gemini-backed client for background prompt writing and image generation."""

from typing import Optional

from google import genai
from google.genai import types

from ....config import (
    IMAGE_ASPECT_RATIO,
    IMAGE_MODEL,
    PROMPT_MODEL,
    get_gemini_api_key,
)
from ....exceptions import ConfigError
from ....utils.logging import get_logger

logger = get_logger(__name__)

PROMPT_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "stanza": types.Schema(type=types.Type.STRING),
            "prompt": types.Schema(type=types.Type.STRING),
        },
    ),
)


class GeminiVisualsClient:
    """``VisualsClient`` on the google-genai SDK.

    Prompts come from a text model asked for a JSON array; images come from
    an Imagen model, one 16:9 JPEG per prompt.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        prompt_model: str = PROMPT_MODEL,
        image_model: str = IMAGE_MODEL,
        client: Optional[genai.Client] = None,
    ):
        if client is None:
            api_key = api_key or get_gemini_api_key()
            if not api_key:
                raise ConfigError(
                    "No Gemini API key found. Set GEMINI_API_KEY or LYRICSYNC_GEMINI_API_KEY"
                )
            client = genai.Client(api_key=api_key)
        self.client = client
        self.prompt_model = prompt_model
        self.image_model = image_model

    def write_prompts(self, system_instruction: str, user_prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.prompt_model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=PROMPT_SCHEMA,
            ),
        )
        return response.text or ""

    def generate_image(self, prompt: str) -> Optional[bytes]:
        response = self.client.models.generate_images(
            model=self.image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type="image/jpeg",
                aspect_ratio=IMAGE_ASPECT_RATIO,
            ),
        )
        images = response.generated_images or []
        if not images or images[0].image is None:
            logger.debug(f"{self.image_model} returned no image")
            return None
        return images[0].image.image_bytes
