import logging
from dataclasses import dataclass
from typing import Any, Protocol

import openai

from models.errors import EmptyTranscriptError, ProviderError
from services.audio_retriever import AudioFile

WORDS_PER_MINUTE = 150


@dataclass
class Transcription:
    text: str


def estimate_duration(text: str) -> int:
    """Estimated episode length in seconds, assuming 150 spoken words per minute."""
    word_count = len(text.split())
    return round(word_count / WORDS_PER_MINUTE * 60)


class TranscriberInterface(Protocol):
    """Protocol for speech-to-text services."""

    def transcribe(self, audio: AudioFile) -> Transcription:
        ...


class WhisperTranscriber:
    """Service for transcribing audio with the OpenAI Whisper API"""

    def __init__(self, client: Any, model: str = "whisper-1", language: str = "en", timeout: float = 120):
        """
        Args:
            client: OpenAI or AzureOpenAI client
            model: Transcription model (deployment name on Azure)
            language: ISO-639-1 language hint
            timeout: Request timeout in seconds
        """
        self.client = client
        self.model = model
        self.language = language
        self.timeout = timeout

    def transcribe(self, audio: AudioFile) -> Transcription:
        """
        Transcribe an audio file in a single attempt.
        Raises ProviderError on a failed call, EmptyTranscriptError if no text came back.
        """
        logging.info(
            f"Calling Whisper API for {audio.filename} ({audio.size} bytes)")

        try:
            response = self.client.audio.transcriptions.create(
                file=(audio.filename, audio.content, audio.content_type),
                model=self.model,
                response_format="verbose_json",
                language=self.language,
                timeout=self.timeout
            )
        except openai.APIStatusError as e:
            logging.error(f"Whisper API error: {e.status_code} {e.response.text}")
            raise ProviderError(e.status_code, e.response.text, provider="Whisper API")
        except openai.APIConnectionError as e:
            logging.error(f"Whisper API unreachable: {e}")
            raise ProviderError(None, str(e), provider="Whisper API")

        text = getattr(response, "text", None)
        logging.info(
            f"Transcription received, text length: {len(text) if isinstance(text, str) else 0}")

        if not isinstance(text, str) or not text.strip():
            raise EmptyTranscriptError()

        return Transcription(text=text)
