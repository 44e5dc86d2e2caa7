"""State of the single floor being visualized.

``Floor`` is an immutable value; the module-level functions are the only
transitions between its states (Empty, Ready, Loading, Succeeded, Failed).
``FloorController`` holds the current value for the web layer and runs the
generation pipeline, one request at a time.
"""

import dataclasses
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from config import DEFAULT_IMAGE_MODEL
from errors import FloorBusyError
from gemini_service import generate_3d_floor_plan
from image_utils import ImageFile

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please upload a floor plan image first."
PREVIEW_ROUTE = "/previews/"


@dataclass(frozen=True)
class Floor:
    """One input image and its generation outcome."""

    original_image: Optional[ImageFile] = None
    original_image_preview: Optional[str] = None
    generated_image_preview: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None
    # bumped on every selection
    selection_id: int = 0

    def to_dict(self):
        return {
            "original_image": self.original_image.filename if self.original_image else None,
            "original_image_preview": self.original_image_preview,
            "generated_image_preview": self.generated_image_preview,
            "is_loading": self.is_loading,
            "error": self.error,
        }


def select_input(floor, image, preview_url):
    return dataclasses.replace(
        floor,
        original_image=image,
        original_image_preview=preview_url,
        generated_image_preview=None,
        error=None,
        selection_id=floor.selection_id + 1,
    )


def reject_missing_input(floor):
    return dataclasses.replace(floor, is_loading=False, error=MISSING_INPUT_MESSAGE)


def start_generation(floor):
    # The previous render stays visible until a new one replaces it.
    return dataclasses.replace(floor, is_loading=True, error=None)


def finish_generation(floor, selection_id, data_url):
    """Record a successful render, unless the input changed since it started."""
    if floor.selection_id != selection_id:
        return floor
    return dataclasses.replace(
        floor, is_loading=False, generated_image_preview=data_url, error=None,
    )


def fail_generation(floor, selection_id, message):
    if floor.selection_id != selection_id:
        return floor
    return dataclasses.replace(
        floor, is_loading=False, error=f"Generation failed: {message}",
    )


class PreviewStore:
    """In-memory image previews served under ``/previews/<token>``."""

    def __init__(self):
        self._items = {}
        self._lock = threading.Lock()

    def create(self, image):
        token = uuid.uuid4().hex
        with self._lock:
            self._items[token] = image
        return PREVIEW_ROUTE + token

    def get(self, token):
        with self._lock:
            return self._items.get(token)

    def release(self, url):
        if not url or not url.startswith(PREVIEW_ROUTE):
            return
        with self._lock:
            self._items.pop(url[len(PREVIEW_ROUTE):], None)

    def __len__(self):
        with self._lock:
            return len(self._items)


class FloorController:
    """Owns the current Floor and drives the generation pipeline."""

    def __init__(self, render=generate_3d_floor_plan, previews=None):
        self._render = render
        self.previews = previews if previews is not None else PreviewStore()
        self._floor = Floor()
        self._lock = threading.Lock()

    @property
    def state(self):
        with self._lock:
            return self._floor

    def select_input(self, image):
        """Replace the input image; raises FloorBusyError while generating."""
        with self._lock:
            if self._floor.is_loading:
                raise FloorBusyError("Cannot change the floor plan while a generation is running")
            superseded = self._floor.original_image_preview
            self._floor = select_input(self._floor, image, self.previews.create(image))
            self.previews.release(superseded)
            floor = self._floor
        logger.info("Selected %s (%s, %d bytes)", image.filename, image.mime_type, len(image.data))
        return floor

    def _begin(self):
        with self._lock:
            if self._floor.is_loading:
                raise FloorBusyError("A generation is already in progress")
            if self._floor.original_image is None:
                self._floor = reject_missing_input(self._floor)
                return self._floor, False
            self._floor = start_generation(self._floor)
            return self._floor, True

    def generate(self, model=DEFAULT_IMAGE_MODEL):
        """Render the selected floor plan and return the resulting state.

        Pipeline failures end up in ``Floor.error`` and are never raised;
        only a second concurrent call raises FloorBusyError.
        """
        floor, started = self._begin()
        if not started:
            return floor

        selection_id = floor.selection_id
        start = time.time()
        logger.info("Generating 3D view of %s with %s", floor.original_image.filename, model)
        try:
            data_url = self._render(floor.original_image, model)
        except Exception as e:
            logger.exception("Generation failed for %s", floor.original_image.filename)
            with self._lock:
                self._floor = self._complete(fail_generation, selection_id, str(e))
                return self._floor

        logger.info("Generated 3D view in %.1fs", time.time() - start)
        with self._lock:
            self._floor = self._complete(finish_generation, selection_id, data_url)
            return self._floor

    def _complete(self, transition, selection_id, value):
        updated = transition(self._floor, selection_id, value)
        if updated is self._floor:
            logger.warning("Discarding result for a floor plan that has since been replaced")
        return updated
