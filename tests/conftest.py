import io
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from party_media import config as settings
from party_media.models import ImageInput
from party_media.orchestrator import app, gemini_client


def make_png(color=(200, 30, 120), size=(64, 48)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


ANALYSIS = {
    "character_description": "Mulher de cerca de 30 anos, cabelo cacheado castanho, olhos verdes, sorriso largo.",
    "assets": [
        {"scene": "Dançando na areia ao pôr do sol", "dialogue": "Bora pra praia!"},
        {"scene": "Segurando um drink tropical perto da fogueira", "dialogue": "Te espero lá!"},
        {"scene": "Acenando em frente ao palco com luzes coloridas", "dialogue": "Vai ser épico!"},
    ],
    "narrator_script": "Neste sábado, a maior festa da praia. Não fique de fora!",
}


def inline_response(data: bytes, mime_type: str):
    part = SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        prompt_feedback=None,
    )


def blocked_response(reason="SAFETY"):
    return SimpleNamespace(candidates=[], prompt_feedback=SimpleNamespace(block_reason=reason))


class FakeModels:
    """Stands in for client.aio.models, answering by model name."""

    def __init__(self):
        self.calls = []
        self.analysis_text = json.dumps(ANALYSIS, ensure_ascii=False)
        self.image_bytes = make_png((10, 200, 10))
        self.audio_bytes = b"\x01\x00" * 1200
        self.audio_mime = "audio/L16;codec=pcm;rate=24000"
        self.fail_image_call = None
        self.block_images = False

    async def generate_content(self, model, contents, config=None):
        self.calls.append(SimpleNamespace(model=model, contents=contents, config=config))

        if model == settings.ANALYSIS_MODEL:
            return SimpleNamespace(text=self.analysis_text)

        if model == settings.IMAGE_MODEL:
            index = len(self.image_calls) - 1
            if self.fail_image_call is not None and index == self.fail_image_call:
                raise ConnectionError("network down")
            if self.block_images:
                return blocked_response()
            return inline_response(self.image_bytes, "image/png")

        if model == settings.TTS_MODEL:
            return inline_response(self.audio_bytes, self.audio_mime)

        raise AssertionError(f"unexpected model {model}")

    @property
    def image_calls(self):
        return [c for c in self.calls if c.model == settings.IMAGE_MODEL]




class FakeGeminiClient:
    def __init__(self):
        self.models = FakeModels()
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def person(png_bytes):
    return ImageInput(data=png_bytes, mime_type="image/png")


@pytest.fixture
def api(fake_client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "OUTPUT_DIR", str(tmp_path))
    app.dependency_overrides[gemini_client] = lambda: fake_client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
