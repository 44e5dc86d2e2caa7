class FloorPlanError(Exception):
    """Base class for every failure in the floor-plan pipeline."""


class ConfigurationError(FloorPlanError):
    """The Gemini API key is not available in the environment."""


class DecodeError(FloorPlanError):
    """The input bytes could not be interpreted as an image."""


class EncodeError(FloorPlanError):
    """Re-encoding a resized image produced no output."""


class ReadError(FloorPlanError):
    """An uploaded blob could not be read."""


class GenerationError(FloorPlanError):
    """The Gemini call itself failed (network, auth, quota, bad model)."""


class NoImageProducedError(FloorPlanError):
    """Gemini answered, but none of the returned parts carried an image."""


class FloorBusyError(FloorPlanError):
    """A generation is already in flight for this floor."""
