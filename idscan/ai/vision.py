"""Thin wrapper around the Claude vision API.

Shared by the OCR and object detection backends. Failures are raised as
PrimitiveFailure; there is no passthrough or retry.
"""

import base64
import io
import json
import logging
from typing import Any, Optional

import numpy as np
from anthropic import Anthropic
from PIL import Image

from idscan.errors import PrimitiveFailure
from idscan.utils.settings import load_settings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def image_to_base64_jpeg(image: np.ndarray, quality: int = 90) -> str:
    """Convert numpy image to base64-encoded JPEG.

    Args:
        image: RGB image, float32 [0, 1] or uint8 [0, 255]
        quality: JPEG quality (1-100)

    Returns:
        Base64-encoded JPEG string
    """
    if image.dtype == np.float32 or image.dtype == np.float64:
        image_uint8 = (np.clip(image, 0, 1) * 255).astype(np.uint8)
    else:
        image_uint8 = image

    pil_image = Image.fromarray(image_uint8).convert("RGB")

    buffer = io.BytesIO()
    pil_image.save(buffer, format="JPEG", quality=quality)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def parse_json_response(response_text: str) -> Any:
    """Parse a JSON reply, tolerating markdown code fences."""
    response_text = response_text.strip()
    if "```json" in response_text:
        start = response_text.find("```json") + 7
        end = response_text.find("```", start)
        response_text = response_text[start:end].strip()
    elif "```" in response_text:
        start = response_text.find("```") + 3
        end = response_text.find("```", start)
        response_text = response_text[start:end].strip()
    return json.loads(response_text)


def ask_vision_json(
    image_b64: str,
    prompt: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    max_tokens: int = 2048,
) -> Any:
    """Send one JPEG plus a prompt to Claude and parse the JSON reply.

    Args:
        image_b64: Base64-encoded JPEG.
        prompt: Instruction text; must ask for JSON only.
        api_key: Anthropic API key. If None, read from settings.
        model: Claude model. If None, read from settings.
        max_tokens: Response token limit.

    Returns:
        The decoded JSON value.

    Raises:
        PrimitiveFailure: If no key is configured, the call fails, or the
            reply is not valid JSON.
    """
    settings = load_settings()
    api_key = api_key or settings.anthropic_api_key
    model = model or settings.ocr_model or DEFAULT_MODEL

    if not api_key:
        raise PrimitiveFailure(
            "Anthropic API key required. Set ANTHROPIC_API_KEY environment variable "
            "or add it to idscan.json."
        )

    try:
        client = Anthropic(api_key=api_key)
        response = client.messages.create(
            model=model,
            max_tokens=max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": "image/jpeg",
                                "data": image_b64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        )
        response_text = response.content[0].text
        logger.debug(f"Claude vision response: {response_text}")
        return parse_json_response(response_text)

    except json.JSONDecodeError as e:
        raise PrimitiveFailure(f"Claude vision reply was not valid JSON: {e}") from e
    except Exception as e:
        raise PrimitiveFailure(f"Claude vision call failed: {e}") from e
