from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

AspectRatio = Literal["1:1", "16:9", "9:16"]
ASPECT_RATIOS: List[str] = ["1:1", "16:9", "9:16"]
DEFAULT_ASPECT_RATIO = "16:9"

CartoonStyle = Literal["Pixar", "Anime (Anos 90)", "Desenho 2D Moderno", "Fantasia Épica"]
CARTOON_STYLES: List[str] = ["Pixar", "Anime (Anos 90)", "Desenho 2D Moderno", "Fantasia Épica"]
DEFAULT_CARTOON_STYLE = "Pixar"


class ImageInput(BaseModel):
    """An uploaded image, kept in memory until it is sent to the model."""
    data: bytes
    mime_type: str


class GenerationContext(BaseModel):
    """What the party is about: either a flyer image or a short narrative."""
    kind: Literal["flyer", "narrative"]
    image: Optional[ImageInput] = None
    text: Optional[str] = None

    @model_validator(mode="after")
    def _check_payload(self):
        if self.kind == "flyer" and self.image is None:
            raise ValueError("flyer context needs an image")
        if self.kind == "narrative" and not (self.text and self.text.strip()):
            raise ValueError("narrative context needs non-blank text")
        return self

    @classmethod
    def from_flyer(cls, image: ImageInput) -> "GenerationContext":
        return cls(kind="flyer", image=image)

    @classmethod
    def from_narrative(cls, text: str) -> "GenerationContext":
        return cls(kind="narrative", text=text.strip())


class SceneAsset(BaseModel):
    scene: str
    dialogue: str


class AnalysisResult(BaseModel):
    character_description: str
    assets: List[SceneAsset]
    narrator_script: str


class PartyAsset(BaseModel):
    image_url: str = Field(..., description="Generated image as a base64 data URL.")
    video_prompt: dict


class GenerationResult(BaseModel):
    character_description: str
    assets: List[PartyAsset]
    narrator_script: str


class CartoonResponse(BaseModel):
    image_url: str
    style: CartoonStyle


class SpeechRequest(BaseModel):
    script: str


class MediaKitRequest(BaseModel):
    assets: List[PartyAsset]
    narrator_script: str = ""
    character_description: str = ""
