"""
Main Orchestrator API - Party media generator
Port: 8000 (configurable)
Takes a person photo plus a party flyer (or a narrative) and produces promotional
images, video prompts and a narrator script, all through Gemini.
"""

import asyncio
import os
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response

from . import config
from .export import create_media_kit_pdf
from .gemini_client import (
    GENERIC_ERROR_MESSAGE,
    GenerationError,
    InvalidImageError,
    get_client,
    load_image_input,
)
from .image_generator import cartoonize, generate_scene_image
from .models import (
    ASPECT_RATIOS,
    CARTOON_STYLES,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_CARTOON_STYLE,
    AspectRatio,
    CartoonResponse,
    CartoonStyle,
    GenerationContext,
    GenerationResult,
    ImageInput,
    MediaKitRequest,
    PartyAsset,
    SceneAsset,
    SpeechRequest,
)
from .narratives import NARRATIVE_EXAMPLES
from .scene_generator import analyze
from .speech_generator import generate_speech
from .video_prompt import build_video_prompt

CARTOON_ERROR_MESSAGE = "Falha ao criar o personagem. Tente novamente."
SPEECH_ERROR_MESSAGE = "Falha ao gerar áudio."
MISSING_PERSON_MESSAGE = "Por favor, envie a foto da pessoa antes de gerar."
MISSING_CONTEXT_MESSAGE = "Por favor, envie o folder da festa ou escreva uma narrativa antes de gerar."
BOTH_CONTEXTS_MESSAGE = "Envie o folder da festa ou uma narrativa, não os dois."

app = FastAPI(
    title="Gerador de Mídia para Festas",
    description="Creates party promo images, video prompts and narrator audio with Gemini.",
    version="1.0.0"
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def gemini_client():
    try:
        return get_client()
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))


async def read_image(upload: Optional[UploadFile], missing_message: str) -> ImageInput:
    if upload is None:
        raise HTTPException(status_code=400, detail=missing_message)
    data = await upload.read()
    if not data:
        raise HTTPException(status_code=400, detail=missing_message)
    try:
        return load_image_input(data, upload.content_type)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def read_context(flyer_image: Optional[UploadFile], narrative: Optional[str]) -> GenerationContext:
    has_narrative = bool(narrative and narrative.strip())
    if flyer_image is not None and has_narrative:
        raise HTTPException(status_code=400, detail=BOTH_CONTEXTS_MESSAGE)
    if flyer_image is not None:
        return GenerationContext.from_flyer(await read_image(flyer_image, MISSING_CONTEXT_MESSAGE))
    if has_narrative:
        return GenerationContext.from_narrative(narrative)
    raise HTTPException(status_code=400, detail=MISSING_CONTEXT_MESSAGE)


async def build_party_asset(
    client,
    person: ImageInput,
    context: GenerationContext,
    character_description: str,
    asset: SceneAsset,
    aspect_ratio: str,
) -> PartyAsset:
    video_prompt = build_video_prompt(character_description, asset, aspect_ratio)
    image_url = await generate_scene_image(
        client, person, context, character_description, asset.scene, aspect_ratio
    )
    return PartyAsset(image_url=image_url, video_prompt=video_prompt)


async def generate_party_assets(
    client,
    person: ImageInput,
    context: GenerationContext,
    aspect_ratio: str,
    num_scenes: Optional[int] = None,
) -> GenerationResult:
    """
    Pipeline:
    1. Analyze person + party theme -> character description, scenes, narrator script
    2. Build a video prompt and generate an image for every scene, in parallel
    Any failure fails the whole generation.
    """
    print("\n" + "=" * 60)
    print("🎉 PARTY MEDIA GENERATION STARTED")
    print("=" * 60)
    print(f"Context: {context.kind}")
    print(f"Aspect ratio: {aspect_ratio}")
    print("=" * 60)

    try:
        analysis = await analyze(client, person, context, num_scenes)

        print(f"\n[STEP 2] Generating {len(analysis.assets)} images in parallel...")
        assets = await asyncio.gather(*[
            build_party_asset(client, person, context, analysis.character_description, asset, aspect_ratio)
            for asset in analysis.assets
        ])
    except Exception as e:
        print(f"\n❌ Error generating party assets: {e!r}")
        raise GenerationError(GENERIC_ERROR_MESSAGE) from e

    print("\n" + "=" * 60)
    print(f"✅ PARTY MEDIA GENERATION COMPLETED ({len(assets)} assets)")
    print("=" * 60)

    return GenerationResult(
        character_description=analysis.character_description,
        assets=list(assets),
        narrator_script=analysis.narrator_script,
    )


@app.post("/generate_assets/", response_model=GenerationResult)
async def generate_assets(
    person_image: Optional[UploadFile] = File(None),
    flyer_image: Optional[UploadFile] = File(None),
    narrative: Optional[str] = Form(None),
    aspect_ratio: AspectRatio = Form(DEFAULT_ASPECT_RATIO),
    client=Depends(gemini_client),
):
    """Main endpoint: generate every asset for a party in one go."""
    person = await read_image(person_image, MISSING_PERSON_MESSAGE)
    context = await read_context(flyer_image, narrative)

    try:
        return await generate_party_assets(client, person, context, aspect_ratio)
    except GenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/regenerate_asset/", response_model=PartyAsset)
async def regenerate_asset(
    person_image: Optional[UploadFile] = File(None),
    flyer_image: Optional[UploadFile] = File(None),
    narrative: Optional[str] = Form(None),
    character_description: str = Form(...),
    scene: str = Form(...),
    dialogue: str = Form(""),
    aspect_ratio: AspectRatio = Form(DEFAULT_ASPECT_RATIO),
    client=Depends(gemini_client),
):
    """Generate a new image for a single scene, keeping the rest of the results."""
    person = await read_image(person_image, MISSING_PERSON_MESSAGE)
    context = await read_context(flyer_image, narrative)

    print(f"\n[REGENERATE] Scene: {scene[:60]}")
    try:
        return await build_party_asset(
            client, person, context, character_description,
            SceneAsset(scene=scene, dialogue=dialogue), aspect_ratio,
        )
    except Exception as e:
        print(f"  ✗ Asset regeneration failed: {e!r}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR_MESSAGE)


@app.post("/cartoonize/", response_model=CartoonResponse)
async def cartoonize_person(
    person_image: Optional[UploadFile] = File(None),
    style: CartoonStyle = Form(DEFAULT_CARTOON_STYLE),
    client=Depends(gemini_client),
):
    person = await read_image(person_image, MISSING_PERSON_MESSAGE)
    try:
        image_url = await cartoonize(client, person, style)
    except Exception as e:
        print(f"✗ Cartoonize failed: {e!r}")
        raise HTTPException(status_code=500, detail=CARTOON_ERROR_MESSAGE)
    return CartoonResponse(image_url=image_url, style=style)


@app.post("/generate_speech/",
    response_class=Response,
    responses={
        200: {
            "content": {"audio/wav": {}},
            "description": "Narrator audio as a 24kHz mono 16-bit WAV file."
        }
    }
)
async def generate_narrator_speech(req: SpeechRequest, client=Depends(gemini_client)):
    if not req.script.strip():
        raise HTTPException(status_code=400, detail="O roteiro do narrador está vazio.")

    try:
        wav = await generate_speech(client, req.script)
    except Exception as e:
        print(f"✗ Speech generation failed: {e!r}")
        raise HTTPException(status_code=500, detail=SPEECH_ERROR_MESSAGE)

    filename = f"narrador_festa_{datetime.now().strftime('%Y%m%d_%H%M%S')}.wav"
    return Response(
        content=wav,
        media_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/export_media_kit/")
async def export_media_kit(req: MediaKitRequest):
    """Bundle generated assets into a PDF stored in the output directory."""
    if not req.assets:
        raise HTTPException(status_code=400, detail="Nenhum recurso para exportar.")

    filename = f"kit_festa_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.pdf"
    output_path = os.path.join(config.OUTPUT_DIR, filename)

    try:
        pdf_path = create_media_kit_pdf(
            req.assets, req.narrator_script, output_path, req.character_description
        )
    except (ValueError, OSError) as e:
        print(f"✗ Media kit export failed: {e}")
        raise HTTPException(status_code=400, detail=f"Imagem inválida no kit: {e}")

    return {
        "status": "success",
        "message": f"Media kit generated with {len(req.assets)} assets",
        "pdf_file": pdf_path,
        "download_url": f"/download/{filename}"
    }


@app.get("/download/{filename}")
async def download_media_kit(filename: str):
    """Download a generated media kit PDF"""
    if os.path.basename(filename) != filename:
        raise HTTPException(status_code=404, detail="File not found")

    file_path = os.path.join(config.OUTPUT_DIR, filename)
    if not os.path.exists(file_path):
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path=file_path,
        filename=filename,
        media_type="application/pdf"
    )


@app.get("/narratives")
async def list_narratives():
    return {"narratives": NARRATIVE_EXAMPLES}


@app.get("/health")
async def health_check():
    configured = bool(config.GEMINI_API_KEY)
    return {
        "status": "healthy" if configured else "degraded",
        "api_key_configured": configured,
        "models": {
            "analysis": config.ANALYSIS_MODEL,
            "image": config.IMAGE_MODEL,
            "tts": config.TTS_MODEL,
        },
    }


@app.get("/")
async def root():
    return {
        "message": "🎉 Gerador de Mídia para Festas - Main Orchestrator",
        "version": "1.0",
        "endpoints": {
            "/generate_assets/": "POST - Analyze photo + flyer/narrative and generate all assets",
            "/regenerate_asset/": "POST - Regenerate the image of a single scene",
            "/cartoonize/": "POST - Turn the person photo into a stylized character",
            "/generate_speech/": "POST - Narrator audio (WAV) from a script",
            "/export_media_kit/": "POST - Bundle assets into a PDF",
            "/download/{filename}": "GET - Download an exported PDF",
            "/narratives": "GET - Example narratives",
            "/health": "GET - Configuration status",
            "/docs": "API documentation"
        },
        "aspect_ratios": ASPECT_RATIOS,
        "cartoon_styles": CARTOON_STYLES,
        "scenes_per_generation": config.NUM_SCENES,
    }


def main():
    print("\n" + "=" * 60)
    print("  PARTY MEDIA GENERATOR - MAIN ORCHESTRATOR v1.0")
    print("=" * 60)
    print(f"  Address: http://{config.HOST}:{config.PORT}")
    print("  Models:")
    print(f"    - analysis: {config.ANALYSIS_MODEL}")
    print(f"    - image:    {config.IMAGE_MODEL}")
    print(f"    - tts:      {config.TTS_MODEL} ({config.TTS_VOICE})")
    print("  Endpoints:")
    print("    - POST /generate_assets/")
    print("    - POST /regenerate_asset/")
    print("    - POST /cartoonize/")
    print("    - POST /generate_speech/")
    print("    - POST /export_media_kit/")
    print("    - GET /download/{filename}")
    print("    - GET /health")
    print("=" * 60 + "\n")

    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
