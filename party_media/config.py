"""
Runtime settings for the party media generator.
Everything is read from the environment (or a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()

# The browser build used API_KEY, keep accepting it
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")

ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gemini-2.5-flash")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
TTS_MODEL = os.getenv("TTS_MODEL", "gemini-2.5-flash-preview-tts")
TTS_VOICE = os.getenv("TTS_VOICE", "Kore")

NUM_SCENES = int(os.getenv("NUM_SCENES", "5"))
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "output")

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
