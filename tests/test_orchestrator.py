import asyncio

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from party_media import config
from party_media.gemini_client import GENERIC_ERROR_MESSAGE, get_client
from party_media.orchestrator import (
    BOTH_CONTEXTS_MESSAGE,
    CARTOON_ERROR_MESSAGE,
    MISSING_CONTEXT_MESSAGE,
    MISSING_PERSON_MESSAGE,
    app,
    download_media_kit,
)
from party_media.speech_generator import WAV_HEADER_SIZE

from conftest import ANALYSIS, make_png


def person_file(png):
    return ("pessoa.png", png, "image/png")


class TestGenerateAssets:
    def test_narrative_generation(self, api, fake_client, png_bytes):
        resp = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Festa na praia ao pôr do sol", "aspect_ratio": "9:16"},
        )

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["character_description"] == ANALYSIS["character_description"]
        assert body["narrator_script"] == ANALYSIS["narrator_script"]
        assert len(body["assets"]) == len(ANALYSIS["assets"])
        for asset, expected in zip(body["assets"], ANALYSIS["assets"]):
            assert asset["image_url"].startswith("data:image/png;base64,")
            assert asset["video_prompt"]["scene"] == expected["scene"]
            assert asset["video_prompt"]["dialogue"] == expected["dialogue"]
            assert asset["video_prompt"]["aspect_ratio"] == "9:16"
        assert len(fake_client.models.image_calls) == len(ANALYSIS["assets"])

    def test_flyer_generation_defaults_to_16_9(self, api, fake_client, png_bytes):
        resp = api.post(
            "/generate_assets/",
            files={
                "person_image": person_file(png_bytes),
                "flyer_image": ("folder.png", make_png((0, 0, 255)), "image/png"),
            },
        )

        assert resp.status_code == 200, resp.text
        assert all(a["video_prompt"]["aspect_ratio"] == "16:9" for a in resp.json()["assets"])
        for call in fake_client.models.image_calls:
            assert call.config.image_config.aspect_ratio == "16:9"

    def test_missing_person_image(self, api, fake_client):
        resp = api.post("/generate_assets/", data={"narrative": "Balada"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == MISSING_PERSON_MESSAGE
        assert fake_client.models.calls == []

    @pytest.mark.parametrize("narrative", [None, "   "])
    def test_missing_context(self, api, png_bytes, narrative):
        data = {"narrative": narrative} if narrative is not None else {}
        resp = api.post("/generate_assets/", files={"person_image": person_file(png_bytes)}, data=data)
        assert resp.status_code == 400
        assert resp.json()["detail"] == MISSING_CONTEXT_MESSAGE

    def test_flyer_and_narrative_together(self, api, png_bytes):
        resp = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes), "flyer_image": person_file(png_bytes)},
            data={"narrative": "Gala"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == BOTH_CONTEXTS_MESSAGE

    def test_invalid_person_image(self, api, fake_client):
        resp = api.post(
            "/generate_assets/",
            files={"person_image": ("p.png", b"not an image", "image/png")},
            data={"narrative": "Gala"},
        )
        assert resp.status_code == 400
        assert fake_client.models.calls == []

    @pytest.mark.parametrize("ratio", ["4:3", "21:9", "quadrado"])
    def test_unsupported_aspect_ratio(self, api, fake_client, png_bytes, ratio):
        resp = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Gala", "aspect_ratio": ratio},
        )
        assert resp.status_code == 422
        assert fake_client.models.calls == []

    def test_one_failed_image_fails_everything(self, api, fake_client, png_bytes):
        fake_client.models.fail_image_call = 1

        resp = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Gala"},
        )

        assert resp.status_code == 500
        assert resp.json()["detail"] == GENERIC_ERROR_MESSAGE

    def test_malformed_analysis_stops_before_images(self, api, fake_client, png_bytes):
        fake_client.models.analysis_text = "```json\n{\"character_description\": \"x\"}\n```"

        resp = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Gala"},
        )

        assert resp.status_code == 500
        assert resp.json()["detail"] == GENERIC_ERROR_MESSAGE
        assert fake_client.models.image_calls == []


class TestRegenerateAsset:
    def test_regenerates_single_scene(self, api, fake_client, png_bytes):
        resp = api.post(
            "/regenerate_asset/",
            files={"person_image": person_file(png_bytes)},
            data={
                "narrative": "Churrasco",
                "character_description": "Homem de óculos",
                "scene": "Virando a picanha",
                "dialogue": "Tá no ponto!",
                "aspect_ratio": "1:1",
            },
        )

        assert resp.status_code == 200, resp.text
        asset = resp.json()
        assert asset["video_prompt"]["scene"] == "Virando a picanha"
        assert asset["video_prompt"]["dialogue"] == "Tá no ponto!"
        assert asset["video_prompt"]["character_description"] == "Homem de óculos"
        assert [c.model for c in fake_client.models.calls] == [config.IMAGE_MODEL]

    def test_failure_returns_generic_message(self, api, fake_client, png_bytes):
        fake_client.models.block_images = True
        resp = api.post(
            "/regenerate_asset/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Churrasco", "character_description": "x", "scene": "y"},
        )
        assert resp.status_code == 500
        assert resp.json()["detail"] == GENERIC_ERROR_MESSAGE

    def test_requires_scene(self, api, png_bytes):
        resp = api.post(
            "/regenerate_asset/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Churrasco", "character_description": "x"},
        )
        assert resp.status_code == 422


class TestCartoonize:
    def test_cartoonize(self, api, png_bytes):
        resp = api.post(
            "/cartoonize/",
            files={"person_image": person_file(png_bytes)},
            data={"style": "Fantasia Épica"},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["style"] == "Fantasia Épica"
        assert resp.json()["image_url"].startswith("data:image/png;base64,")

    def test_unknown_style(self, api, png_bytes):
        resp = api.post("/cartoonize/", files={"person_image": person_file(png_bytes)}, data={"style": "Aquarela"})
        assert resp.status_code == 422

    def test_failure(self, api, fake_client, png_bytes):
        fake_client.models.block_images = True
        resp = api.post("/cartoonize/", files={"person_image": person_file(png_bytes)})
        assert resp.status_code == 500
        assert resp.json()["detail"] == CARTOON_ERROR_MESSAGE


class TestSpeech:
    def test_returns_wav_attachment(self, api, fake_client):
        resp = api.post("/generate_speech/", json={"script": ANALYSIS["narrator_script"]})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "audio/wav"
        assert "narrador_festa_" in resp.headers["content-disposition"]
        assert resp.content[:4] == b"RIFF"
        assert len(resp.content) == WAV_HEADER_SIZE + len(fake_client.models.audio_bytes)

    def test_blank_script(self, api, fake_client):
        resp = api.post("/generate_speech/", json={"script": "  "})
        assert resp.status_code == 400
        assert fake_client.models.calls == []


class TestMediaKit:
    def test_export_then_download(self, api, png_bytes):
        generated = api.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Festa na praia"},
        ).json()

        resp = api.post("/export_media_kit/", json=generated)

        assert resp.status_code == 200, resp.text
        download = api.get(resp.json()["download_url"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert download.content.startswith(b"%PDF")

    def test_export_requires_assets(self, api):
        resp = api.post("/export_media_kit/", json={"assets": [], "narrator_script": "x"})
        assert resp.status_code == 400

    def test_export_rejects_non_data_url(self, api):
        asset = {"image_url": "https://example.com/a.png", "video_prompt": {"scene": "x"}}
        resp = api.post("/export_media_kit/", json={"assets": [asset]})
        assert resp.status_code == 400

    def test_download_missing_file(self, api):
        assert api.get("/download/nao_existe.pdf").status_code == 404

    @pytest.mark.parametrize("filename", ["../segredo.pdf", "..%2Fsegredo.pdf"])
    def test_download_stays_inside_output_dir(self, api, monkeypatch, tmp_path, filename):
        out = tmp_path / "out"
        out.mkdir()
        monkeypatch.setattr(config, "OUTPUT_DIR", str(out))
        (tmp_path / "segredo.pdf").write_bytes(b"%PDF-1.4 segredo")

        assert api.get(f"/download/{filename}").status_code == 404

        with pytest.raises(HTTPException) as exc:
            asyncio.run(download_media_kit("../segredo.pdf"))
        assert exc.value.status_code == 404


def test_info_routes(api):
    root = api.get("/").json()
    assert root["aspect_ratios"] == ["1:1", "16:9", "9:16"]
    assert "Pixar" in root["cartoon_styles"]

    narratives = api.get("/narratives").json()["narratives"]
    assert [n["title"] for n in narratives] == [
        "Festa na Praia", "Balada Neon", "Evento de Gala", "Churrasco & Samba"
    ]

    health = api.get("/health").json()
    assert health["models"]["analysis"] == config.ANALYSIS_MODEL


def test_missing_api_key_is_reported(monkeypatch, png_bytes):
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)
    get_client.cache_clear()
    app.dependency_overrides.clear()

    with TestClient(app) as client:
        resp = client.post(
            "/generate_assets/",
            files={"person_image": person_file(png_bytes)},
            data={"narrative": "Gala"},
        )

    assert resp.status_code == 500
    assert "GEMINI_API_KEY" in resp.json()["detail"]
    get_client.cache_clear()
