from typing import Optional


class PodcastProcessingError(Exception):
    """Base class for every error raised while processing a podcast."""


class ConfigError(PodcastProcessingError):
    """A required setting or provider credential is missing."""


class InputError(PodcastProcessingError):
    """The invocation request is missing required fields."""


class RetrievalError(PodcastProcessingError):
    """The audio file could not be fetched from object storage."""


class InvalidAudioReferenceError(RetrievalError):
    def __init__(self, audio_url: str):
        super().__init__("Invalid audio URL format")
        self.audio_url = audio_url


class AudioNotFoundError(RetrievalError):
    def __init__(self, key: str):
        super().__init__(f"Audio file not found in storage: {key}")
        self.key = key


class EmptyAudioError(RetrievalError):
    def __init__(self, key: str):
        super().__init__("Downloaded audio file is empty")
        self.key = key


class AudioTooLargeError(RetrievalError):
    def __init__(self, size_bytes: int, limit_bytes: int, at_least: bool = False):
        # at_least marks a download aborted before its full size was known
        qualifier = "at least " if at_least else ""
        super().__init__(
            f"Audio file too large: {qualifier}{size_bytes / 1024 / 1024:.2f}MB. "
            f"Maximum size is {limit_bytes // (1024 * 1024)}MB.")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        self.at_least = at_least


class ProviderError(PodcastProcessingError):
    """A third-party API answered with a non-success status."""

    def __init__(self, status_code: Optional[int], body: str, provider: str = "provider"):
        if status_code is None:
            message = f"{provider} request failed: {body}"
        else:
            message = f"{provider} failed: {status_code} {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.provider = provider


class EmptyTranscriptError(PodcastProcessingError):
    def __init__(self):
        super().__init__("No transcription text received from Whisper API")


class StoreError(PodcastProcessingError):
    """The podcast store rejected a read or an update."""
