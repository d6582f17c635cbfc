"""Error taxonomy for capture, analysis, and provider configuration."""


class CaptureError(Exception):
    """Base class for failures while producing a still frame."""


class NoDeviceError(CaptureError):
    """No camera device could be opened and nothing else is available to capture."""


class FrameNotReadyError(CaptureError):
    """The live stream did not become ready within the capture timeout."""


class NoDimensionsError(CaptureError):
    """The live stream reported metadata but zero video dimensions."""


class CollaboratorError(Exception):
    """An external provider call failed (network or provider-side error).

    Attributes:
        status_code: HTTP status reported by the provider, when known.
        details: Provider-specific error message.
    """

    def __init__(self, message: str, status_code: int = 502, details: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigurationMissingError(Exception):
    """A required credential for a provider is absent."""

    def __init__(self, provider: str, env_var: str) -> None:
        super().__init__(f"{provider} API key not configured")
        self.provider = provider
        self.env_var = env_var

    @property
    def hint(self) -> str:
        return f"Please set {self.env_var} environment variable"

    def to_payload(self) -> dict:
        return {"error": str(self), "hint": self.hint}
