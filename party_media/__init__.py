"""Party media generator: promo images, video prompts and narrator audio with Gemini."""

__version__ = "1.0.0"
