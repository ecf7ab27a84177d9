import logging
import mimetypes
import posixpath
from dataclasses import dataclass

from models.errors import AudioTooLargeError, EmptyAudioError, InvalidAudioReferenceError
from services.storage_service import AudioStorageService

PUBLIC_AUDIO_MARKER = "/storage/v1/object/public/audio-files/"

# Whisper's hard ceiling
MAX_AUDIO_BYTES = 25 * 1024 * 1024

DEFAULT_CONTENT_TYPE = "audio/mpeg"


@dataclass
class AudioFile:
    key: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    filename: str = "audio.mp3"

    @property
    def size(self) -> int:
        return len(self.content)


def parse_audio_reference(audio_url: str) -> str:
    """Return the storage key of a public audio URL."""
    parts = audio_url.split(PUBLIC_AUDIO_MARKER)
    if len(parts) != 2 or not parts[1]:
        raise InvalidAudioReferenceError(audio_url)
    return parts[1]


class AudioRetriever:
    """Resolves public audio URLs to raw bytes, enforcing the size ceiling."""

    def __init__(self, storage: AudioStorageService, max_bytes: int = MAX_AUDIO_BYTES):
        self.storage = storage
        self.max_bytes = max_bytes

    def retrieve(self, audio_url: str) -> AudioFile:
        """
        Download the audio behind a public URL.

        Args:
            audio_url: Public URL returned by the upload flow

        Returns:
            AudioFile with the raw bytes and a content-type hint

        Raises:
            InvalidAudioReferenceError: URL does not point into the audio bucket
            AudioNotFoundError: Object does not exist
            EmptyAudioError: Object has no content
            AudioTooLargeError: Object exceeds the size ceiling
        """
        key = parse_audio_reference(audio_url)
        logging.info(f"Extracted file path: {key}")

        content = self.storage.download(key, self.max_bytes)
        logging.info(
            f"Audio file downloaded successfully, size: {len(content)} bytes")

        if len(content) == 0:
            raise EmptyAudioError(key)
        if len(content) > self.max_bytes:
            raise AudioTooLargeError(len(content), self.max_bytes)

        filename = posixpath.basename(key) or "audio.mp3"
        content_type, _ = mimetypes.guess_type(filename)
        if not content_type or not content_type.startswith("audio/"):
            content_type = DEFAULT_CONTENT_TYPE

        return AudioFile(key=key, content=content, content_type=content_type, filename=filename)
