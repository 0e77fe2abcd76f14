"""
Media kit export: every generated image with its scene, dialogue and video
prompt, plus the narrator script, bundled into a single A4 PDF.
"""

import base64
import binascii
import io
import json
import os
import re
import textwrap
from datetime import datetime
from typing import List, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .models import PartyAsset

_DATA_URL_RE = re.compile(r"^data:([\w/+.-]+);base64,(.*)$", re.DOTALL)


def decode_data_url(url: str) -> Tuple[str, bytes]:
    match = _DATA_URL_RE.match(url or "")
    if not match:
        raise ValueError("Not a base64 data URL")
    try:
        return match.group(1), base64.b64decode(match.group(2), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def _draw_border(c, page_width, page_height):
    c.setStrokeColorRGB(0, 0, 0)
    c.setLineWidth(2)
    c.rect(10, 10, page_width - 20, page_height - 20, fill=0)


def _draw_wrapped(c, text: str, x: float, y: float, width_chars: int, leading: float, min_y: float) -> float:
    """Draw text wrapped at width_chars; stops at min_y. Returns the next y."""
    for paragraph in text.splitlines() or [""]:
        for line in textwrap.wrap(paragraph, width=width_chars) or [""]:
            if y < min_y:
                return y
            c.drawString(x, y, line)
            y -= leading
    return y


def create_media_kit_pdf(
    assets: List[PartyAsset],
    narrator_script: str,
    output_path: str,
    character_description: str = "",
) -> str:
    print(f"\n[EXPORT] Creating media kit PDF with {len(assets)} assets...")

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    c = canvas.Canvas(output_path, pagesize=A4)
    page_width, page_height = A4
    margin = 40

    # Title page
    c.setFont("Helvetica-Bold", 30)
    c.drawCentredString(page_width / 2, page_height - 100, "Kit de Mídia da Festa")
    c.setFont("Helvetica", 12)
    c.drawCentredString(page_width / 2, page_height - 130, f"Gerado em {datetime.now().strftime('%Y-%m-%d')}")

    y = page_height - 180
    if narrator_script:
        c.setFont("Helvetica-Bold", 14)
        c.drawString(margin, y, "Roteiro do Narrador")
        c.setFont("Helvetica", 11)
        y = _draw_wrapped(c, narrator_script, margin, y - 20, 90, 14, margin)

    if character_description:
        c.setFont("Helvetica-Bold", 14)
        c.drawString(margin, y - 20, "Descrição do Personagem")
        c.setFont("Helvetica", 10)
        _draw_wrapped(c, character_description, margin, y - 40, 100, 13, margin)

    _draw_border(c, page_width, page_height)
    c.showPage()

    # One page per asset: image on top, texts below
    image_box_height = page_height / 2
    for i, asset in enumerate(assets):
        print(f"  Adding asset {i + 1}/{len(assets)}...")
        _, image_bytes = decode_data_url(asset.image_url)

        img = Image.open(io.BytesIO(image_bytes))
        img_width, img_height = img.size
        box_width = page_width - 2 * margin
        scale = min(box_width / img_width, image_box_height / img_height)
        new_width, new_height = img_width * scale, img_height * scale
        x = margin + (box_width - new_width) / 2
        top = page_height - margin
        c.drawImage(ImageReader(img), x, top - new_height, width=new_width, height=new_height)

        y = top - new_height - 25
        prompt = asset.video_prompt
        c.setFont("Helvetica-Bold", 13)
        c.drawString(margin, y, f"Cena {i + 1}")
        c.setFont("Helvetica", 10)
        y = _draw_wrapped(c, str(prompt.get("scene", "")), margin, y - 16, 100, 13, margin)
        if prompt.get("dialogue"):
            c.setFont("Helvetica-Oblique", 10)
            y = _draw_wrapped(c, f"\"{prompt['dialogue']}\"", margin, y - 4, 100, 13, margin)

        c.setFont("Courier", 7)
        _draw_wrapped(c, json.dumps(prompt, indent=2, ensure_ascii=False), margin, y - 10, 130, 9, margin)

        _draw_border(c, page_width, page_height)
        c.showPage()

    c.save()
    print(f"✓ Media kit created: {output_path}")
    return output_path
