import base64
import logging
import time

from google import genai
from google.genai import types
from google.genai.types import Modality

from config import DEFAULT_IMAGE_MODEL, REQUEST_TIMEOUT_MS, get_api_key
from errors import GenerationError, NoImageProducedError
from image_utils import downscale_image, encode_base64, to_data_url
from system_prompt import FLOOR_PLAN_PROMPT

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image was generated by the API."


def create_client(api_key):
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=REQUEST_TIMEOUT_MS),
    )


def build_request_parts(encoded_image, mime_type, prompt=FLOOR_PLAN_PROMPT):
    """Assemble the [instructions, floor plan] parts of a generation request."""
    return [
        {"text": prompt},
        {"inline_data": {"data": encoded_image, "mime_type": mime_type}},
    ]


def _to_sdk_parts(parts):
    sdk_parts = []
    for part in parts:
        if "text" in part:
            sdk_parts.append(types.Part.from_text(text=part["text"]))
        else:
            inline = part["inline_data"]
            sdk_parts.append(types.Part.from_bytes(
                data=base64.b64decode(inline["data"]),
                mime_type=inline["mime_type"],
            ))
    return sdk_parts


def extract_image_data_url(response):
    """Return the first inline image in a Gemini response as a data URL."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        raise NoImageProducedError(NO_IMAGE_MESSAGE)

    for part in candidates[0].content.parts or []:
        if part.inline_data and part.inline_data.data:
            b64 = base64.b64encode(part.inline_data.data).decode("utf-8")
            mime = part.inline_data.mime_type or "image/png"
            return to_data_url(mime, b64)
        if getattr(part, "text", None):
            logger.debug("Model returned text alongside the render: %s", part.text)

    raise NoImageProducedError(NO_IMAGE_MESSAGE)


def request_image(parts, model=DEFAULT_IMAGE_MODEL, client=None):
    """Send one generation request to Gemini and return the rendered image.

    The API key is checked before anything touches the network. The call is
    made exactly once; failures are raised as GenerationError and a response
    without an image part as NoImageProducedError.
    """
    api_key = get_api_key()
    if client is None:
        client = create_client(api_key)

    config = types.GenerateContentConfig(
        response_modalities=[Modality.TEXT, Modality.IMAGE],
    )
    contents = types.Content(role="user", parts=_to_sdk_parts(parts))

    start = time.time()
    try:
        response = client.models.generate_content(
            model=model, contents=contents, config=config,
        )
    except Exception as e:
        raise GenerationError(str(e)) from e
    logger.info("Gemini %s answered in %.1fs", model, time.time() - start)

    return extract_image_data_url(response)


def generate_3d_floor_plan(image, model=DEFAULT_IMAGE_MODEL, client=None):
    """Run the whole pipeline for one floor plan: resize, encode, build, send."""
    prepared = downscale_image(image)
    encoded = encode_base64(prepared)
    parts = build_request_parts(encoded, prepared.mime_type)
    return request_image(parts, model=model, client=client)
