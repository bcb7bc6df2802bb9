"""Custom TTS exceptions."""


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ValidationError(TTSError, ValueError):
    """Exception raised when input violates a precondition.

    Raised before any network or disk access, so nothing needs cleaning up.
    """

    pass


class TTSAuthError(TTSError):
    """Exception raised when no ElevenLabs API key is available."""

    pass


class TTSAPIError(TTSError):
    """Exception raised for API communication errors.

    This typically occurs when:
    - The service answers with a non-2xx status
    - Network connectivity issues prevent a response

    Attributes:
        status_code: HTTP status returned by the service, if any
        body: Raw response payload returned with the error, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: bytes | str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
        self.body = body


class SynthesisError(TTSAPIError):
    """Exception raised when the text-to-speech call itself fails."""

    pass


class NotSupportedError(TTSError, NotImplementedError):
    """Exception raised when an unimplemented capability is invoked."""

    pass


class ArtifactExistsError(FileExistsError):
    """Raised when a cached artifact is already present at the target path.

    Expected when two calls race to store the same cache key; the loser
    should pick up the winner's file rather than fail.
    """

    pass
