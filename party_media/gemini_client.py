"""
Shared helpers around the Gemini SDK: client setup, request parts built from
uploads, and pulling inline data (images / audio) back out of responses.
"""

import base64
import io
from functools import lru_cache
from typing import List, Optional, Tuple

from google import genai
from google.genai import types
from PIL import Image, UnidentifiedImageError

from . import config
from .models import GenerationContext, ImageInput

GENERIC_ERROR_MESSAGE = "Falha ao gerar os recursos. Verifique o console para mais detalhes."


class GenerationError(RuntimeError):
    """A model call failed. The message is safe to show to the user."""


class InvalidImageError(ValueError):
    pass


@lru_cache(maxsize=1)
def get_client() -> genai.Client:
    if not config.GEMINI_API_KEY:
        raise RuntimeError("GEMINI_API_KEY environment variable not set")
    return genai.Client(api_key=config.GEMINI_API_KEY)


def load_image_input(data: bytes, mime_type: Optional[str] = None) -> ImageInput:
    """Check that the upload really is an image and settle its MIME type."""
    if not data:
        raise InvalidImageError("Imagem vazia.")

    try:
        with Image.open(io.BytesIO(data)) as img:
            detected = Image.MIME.get(img.format or "")
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"Arquivo de imagem inválido: {e}") from e

    if not mime_type or not mime_type.startswith("image/"):
        mime_type = detected or "image/jpeg"

    return ImageInput(data=data, mime_type=mime_type)


def image_part(image: ImageInput) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def context_parts(context: GenerationContext) -> List[types.Part]:
    if context.kind == "flyer":
        return [image_part(context.image)]
    return [types.Part.from_text(text=f"Narrativa da festa: {context.text}")]


def _response_parts(response) -> list:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def find_inline_data(response) -> Optional[Tuple[bytes, str]]:
    """Return (data, mime_type) of the first inline blob in the response, if any."""
    for part in _response_parts(response):
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            data = inline.data
            # REST payloads carry base64 text, the SDK normally hands back bytes
            if isinstance(data, str):
                data = base64.b64decode(data)
            return data, inline.mime_type or ""
    return None


def block_reason(response) -> str:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback else None
    return str(reason) if reason else "Unknown"


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
