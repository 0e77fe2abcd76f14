"""
Image synthesis: the reference person placed into each promotional scene,
and the optional "cartoonize" pass that turns the photo into a character.
"""

from typing import Optional

from google.genai import types

from . import config
from .gemini_client import (
    GenerationError,
    block_reason,
    context_parts,
    find_inline_data,
    image_part,
    to_data_url,
)
from .models import GenerationContext, ImageInput

FRAMING = {
    "1:1": "enquadramento quadrado, pessoa centralizada",
    "16:9": "enquadramento horizontal (paisagem), pessoa em plano médio com o cenário da festa visível",
    "9:16": "enquadramento vertical (retrato), ideal para stories, pessoa de corpo inteiro ou plano americano",
}

CARTOON_STYLE_PROMPTS = {
    "Pixar": "animação 3D no estilo Pixar, proporções levemente exageradas, olhos expressivos, iluminação suave e cores vibrantes",
    "Anime (Anos 90)": "anime dos anos 90, traço em cel-shading, cores chapadas, olhos grandes e cabelos com mechas marcadas",
    "Desenho 2D Moderno": "desenho animado 2D moderno, linhas limpas, formas simplificadas e paleta de cores viva",
    "Fantasia Épica": "pintura de fantasia épica, iluminação dramática, detalhes ricos, como uma arte conceitual de RPG",
}


def build_scene_image_prompt(character_description: str, scene: str, aspect_ratio: str, context_kind: str) -> str:
    theme_source = "do folder da festa (segunda imagem)" if context_kind == "flyer" else "da narrativa fornecida"
    framing = FRAMING.get(aspect_ratio, FRAMING["16:9"])

    return (
        "Gere uma fotografia fotorrealista de alta qualidade. "
        "A pessoa na imagem DEVE ser exatamente a mesma pessoa da primeira imagem (a 'pessoa de referência') "
        f"e corresponder à seguinte descrição: [DESCRIÇÃO DA PESSOA: {character_description}]. "
        f"A cena é: [CENA: {scene}]. "
        f"Use o tema, as cores e o clima {theme_source}. "
        "Preserve a identidade da pessoa: rosto, tom de pele, cabelo e idade não podem mudar. "
        "O estilo deve ser cinematográfico e vibrante. "
        f"Proporção da imagem: {aspect_ratio}, {framing}. "
        "Não inclua textos, legendas, logotipos ou letras na imagem."
    )


def build_cartoon_prompt(style: str) -> str:
    style_prompt = CARTOON_STYLE_PROMPTS.get(style, CARTOON_STYLE_PROMPTS["Pixar"])
    return (
        "Transforme a pessoa desta foto em um personagem estilizado. "
        f"Estilo: {style}, {style_prompt}. "
        "Mantenha as características reconhecíveis da pessoa (formato do rosto, cabelo, tom de pele, "
        "óculos ou acessórios) e a mesma roupa. Fundo simples e neutro, personagem de frente, "
        "sem textos na imagem."
    )


async def _generate_image(client, contents: list, aspect_ratio: Optional[str] = None) -> str:
    image_config = types.ImageConfig(aspect_ratio=aspect_ratio) if aspect_ratio else None
    response = await client.aio.models.generate_content(
        model=config.IMAGE_MODEL,
        contents=contents,
        config=types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=image_config,
        ),
    )

    inline = find_inline_data(response)
    if inline is None:
        raise GenerationError(f"Image generation failed. Reason: {block_reason(response)}")

    data, mime_type = inline
    return to_data_url(data, mime_type or "image/png")


async def generate_scene_image(
    client,
    person: ImageInput,
    context: GenerationContext,
    character_description: str,
    scene: str,
    aspect_ratio: str,
) -> str:
    """Generate one promotional image and return it as a data URL."""
    prompt = build_scene_image_prompt(character_description, scene, aspect_ratio, context.kind)
    contents = [image_part(person), *context_parts(context), types.Part.from_text(text=prompt)]

    image_url = await _generate_image(client, contents, aspect_ratio)
    print(f"  ✓ Image generated for scene: {scene[:60]}")
    return image_url


async def cartoonize(client, person: ImageInput, style: str) -> str:
    print(f"\n[CARTOON] Creating '{style}' character from person photo...")
    contents = [image_part(person), types.Part.from_text(text=build_cartoon_prompt(style))]

    image_url = await _generate_image(client, contents)
    print("✓ Character created")
    return image_url
