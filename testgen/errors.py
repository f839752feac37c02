"""Error types raised by the test generation pipeline."""


class TestGenError(Exception):
    """Base class for failures surfaced to the caller."""

    __test__ = False


class InvalidTemplate(TestGenError, ValueError):
    """A prompt template was registered without an instruction."""


class UpstreamUnavailable(TestGenError):
    """The Ollama host could not be reached."""


class ModelNotFound(TestGenError):
    """The requested model is not present on the Ollama host."""

    def __init__(self, model: str):
        super().__init__(f'Model "{model}" not found. Please pull the model first.')
        self.model = model


class UpstreamError(TestGenError):
    """Ollama reported a failure; the message is passed through verbatim."""
