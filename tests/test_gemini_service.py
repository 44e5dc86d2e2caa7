import base64
import io
from types import SimpleNamespace

import pytest
from PIL import Image

import gemini_service
from conftest import FakeClient, gemini_response, inline_part, text_part
from errors import ConfigurationError, DecodeError, GenerationError, NoImageProducedError
from gemini_service import (
    build_request_parts,
    extract_image_data_url,
    generate_3d_floor_plan,
    request_image,
)
from image_utils import ImageFile
from system_prompt import FLOOR_PLAN_PROMPT


def test_build_request_parts_orders_prompt_then_image():
    parts = build_request_parts("YWJj", "image/png")
    assert parts == [
        {"text": FLOOR_PLAN_PROMPT},
        {"inline_data": {"data": "YWJj", "mime_type": "image/png"}},
    ]


def test_prompt_is_passed_through_verbatim():
    assert FLOOR_PLAN_PROMPT.strip()
    parts = build_request_parts("YWJj", "image/jpeg", prompt="custom")
    assert parts[0] == {"text": "custom"}


def test_extract_returns_first_image_part():
    response = gemini_response(
        text_part("Here is your render"),
        inline_part(b"first", "image/png"),
        inline_part(b"second", "image/jpeg"),
    )
    assert extract_image_data_url(response) == "data:image/png;base64," + base64.b64encode(b"first").decode()


def test_extract_without_image_parts_raises():
    with pytest.raises(NoImageProducedError, match="No image was generated"):
        extract_image_data_url(gemini_response(text_part("sorry")))


def test_extract_without_candidates_raises():
    with pytest.raises(NoImageProducedError):
        extract_image_data_url(SimpleNamespace(candidates=None))


def test_missing_api_key_fails_before_network(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    client = FakeClient(response=gemini_response(inline_part(b"img")))

    def fail_create(api_key):
        raise AssertionError("client must not be created")

    monkeypatch.setattr(gemini_service, "create_client", fail_create)
    with pytest.raises(ConfigurationError):
        request_image(build_request_parts("YWJj", "image/png"), client=client)
    assert client.models.calls == []


def test_request_image_calls_model_once(api_key):
    client = FakeClient(response=gemini_response(inline_part(b"render", "image/png")))
    data_url = request_image(
        build_request_parts(base64.b64encode(b"plan").decode(), "image/png"),
        model="gemini-2.5-flash-image",
        client=client,
    )
    assert data_url.startswith("data:image/png;base64,")
    assert len(client.models.calls) == 1
    call = client.models.calls[0]
    assert call["model"] == "gemini-2.5-flash-image"
    sdk_parts = call["contents"].parts
    assert sdk_parts[0].text == FLOOR_PLAN_PROMPT
    assert sdk_parts[1].inline_data.data == b"plan"
    assert sdk_parts[1].inline_data.mime_type == "image/png"


def test_request_image_wraps_service_failures(api_key):
    client = FakeClient(error=RuntimeError("quota exceeded"))
    with pytest.raises(GenerationError, match="quota exceeded"):
        request_image(build_request_parts("YWJj", "image/png"), client=client)
    assert len(client.models.calls) == 1


def test_request_image_uses_created_client(api_key, monkeypatch):
    client = FakeClient(response=gemini_response(inline_part(b"render")))
    seen = []

    def fake_create(key):
        seen.append(key)
        return client

    monkeypatch.setattr(gemini_service, "create_client", fake_create)
    request_image(build_request_parts("YWJj", "image/png"))
    assert seen == ["test-key"]


def test_pipeline_sends_downscaled_jpeg(api_key, png_image):
    client = FakeClient(response=gemini_response(inline_part(b"render")))
    generate_3d_floor_plan(png_image(2000, 1000), client=client)

    image_part = client.models.calls[0]["contents"].parts[1]
    assert image_part.inline_data.mime_type == "image/jpeg"
    with Image.open(io.BytesIO(image_part.inline_data.data)) as img:
        assert img.width == 1024


def test_pipeline_rejects_undecodable_input_before_calling(api_key):
    client = FakeClient(response=gemini_response(inline_part(b"render")))
    with pytest.raises(DecodeError):
        generate_3d_floor_plan(ImageFile("x.png", "image/png", b"junk"), client=client)
    assert client.models.calls == []
