import os

from dotenv import load_dotenv

from errors import ConfigurationError

load_dotenv()

API_KEY_ENV = "GEMINI_API_KEY"

IMAGE_MODELS = [
    "gemini-2.5-flash-image",
    "gemini-3.1-flash-image-preview",
]

DEFAULT_IMAGE_MODEL = IMAGE_MODELS[0]

# Uploads wider than this are downscaled before being sent to Gemini.
MAX_IMAGE_WIDTH = int(os.environ.get("FLOORPLAN_MAX_WIDTH", 1024))
JPEG_QUALITY = 90

REQUEST_TIMEOUT_MS = 300_000

PORT = int(os.environ.get("PORT", 5001))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def get_api_key():
    """Read the Gemini key from the environment at call time."""
    api_key = os.environ.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} environment variable not set")
    return api_key
