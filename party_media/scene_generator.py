"""
Step 1 of the pipeline: ask Gemini to study the reference person and the party
theme, and return a character description, the promotional scenes (each with a
short dialogue line) and a narrator script as strict JSON.
"""

import json
import re
from typing import Optional

from google.genai import types

from . import config
from .gemini_client import context_parts, image_part
from .models import AnalysisResult, GenerationContext, ImageInput, SceneAsset

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?([\s\S]*?)\n?[ \t]*```", re.IGNORECASE)


class AnalysisFormatError(ValueError):
    """The model answered, but not with the JSON we asked for."""


def build_analysis_prompt(context_kind: str, num_scenes: int) -> str:
    if context_kind == "flyer":
        theme = "o tema da festa na segunda imagem (o folder da festa)"
    else:
        theme = "o tema da festa descrito na narrativa fornecida"

    return f"""
Analise a pessoa na primeira imagem (a 'pessoa de referência') e {theme}.

1. Crie uma `character_description` (string) que seja uma descrição fotorrealista EXTREMAMENTE detalhada da pessoa de referência. Foque em características únicas e imutáveis para garantir máxima fidelidade (formato do rosto, cor e formato dos olhos, formato do nariz, lábios, tom de pele, pintas ou cicatrizes visíveis, tipo/cor/estilo do cabelo, idade aproximada). Descreva também a roupa e a expressão na imagem de referência.
2. Crie {num_scenes} `assets` (array de {num_scenes} objetos) distintos e criativos para imagens promocionais que incorporem esta pessoa e o tema da festa. Cada objeto tem:
   - "scene": a descrição visual da cena (string)
   - "dialogue": uma fala curta e animada da pessoa, em português do Brasil (string)
3. Crie um `narrator_script` (string): um roteiro curto de locução (2 a 4 frases), em português do Brasil, convidando o público para a festa.

Responda SOMENTE com um objeto JSON válido, sem markdown e sem explicações, no formato:
{{
  "character_description": "...",
  "assets": [
    {{"scene": "...", "dialogue": "..."}}
  ],
  "narrator_script": "..."
}}
""".strip()


def clean_json_string(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    text = (text or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _required_text(data: dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise AnalysisFormatError(f"{where}: campo '{key}' ausente ou vazio")
    return value.strip()


def parse_analysis_response(text: str) -> AnalysisResult:
    # Bare JSON first: string values may legitimately contain ``` themselves
    try:
        data = json.loads((text or "").strip())
    except json.JSONDecodeError:
        try:
            data = json.loads(clean_json_string(text))
        except json.JSONDecodeError as e:
            raise AnalysisFormatError(f"JSON inválido: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisFormatError("A resposta não é um objeto JSON")

    character_description = _required_text(data, "character_description", "análise")

    raw_assets = data.get("assets")
    if not isinstance(raw_assets, list) or not raw_assets:
        raise AnalysisFormatError("análise: 'assets' deve ser uma lista não vazia")

    assets = []
    for i, item in enumerate(raw_assets):
        if not isinstance(item, dict):
            raise AnalysisFormatError(f"asset {i}: não é um objeto")
        assets.append(SceneAsset(
            scene=_required_text(item, "scene", f"asset {i}"),
            dialogue=_required_text(item, "dialogue", f"asset {i}"),
        ))

    narrator_script = data.get("narrator_script")
    if not isinstance(narrator_script, str):
        raise AnalysisFormatError("análise: 'narrator_script' ausente")

    return AnalysisResult(
        character_description=character_description,
        assets=assets,
        narrator_script=narrator_script.strip(),
    )


async def analyze(
    client,
    person: ImageInput,
    context: GenerationContext,
    num_scenes: Optional[int] = None,
) -> AnalysisResult:
    num_scenes = num_scenes or config.NUM_SCENES
    print(f"\n[STEP 1] Analyzing person and party theme ({context.kind}), asking for {num_scenes} scenes...")

    contents = [image_part(person), *context_parts(context),
                types.Part.from_text(text=build_analysis_prompt(context.kind, num_scenes))]

    response = await client.aio.models.generate_content(
        model=config.ANALYSIS_MODEL,
        contents=contents,
        config=types.GenerateContentConfig(response_mime_type="application/json"),
    )
    response_text = response.text or ""

    print("\n--- Raw Analysis Response ---")
    print(response_text[:500] + ("..." if len(response_text) > 500 else ""))
    print("-----------------------------\n")

    result = parse_analysis_response(response_text)
    print(f"✓ Character description: {len(result.character_description)} chars, {len(result.assets)} scenes")
    return result
