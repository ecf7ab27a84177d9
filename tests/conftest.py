from types import SimpleNamespace
from unittest.mock import Mock

import httpx
import openai
import pytest

from models.podcast import PodcastRecord
from services.audio_retriever import AudioRetriever
from services.podcast_repository import InMemoryPodcastRepository
from services.podcast_summarizer import ShowNotesSummarizer
from services.processing_pipeline import PodcastProcessingPipeline
from services.storage_service import LocalFileStorageService
from services.whisper_transcriber import WhisperTranscriber

PODCAST_ID = "pod-1"
AUDIO_KEY = "user-1/1700000000000.mp3"
AUDIO_URL = f"https://demo.supabase.co/storage/v1/object/public/audio-files/{AUDIO_KEY}"


def status_error(status_code: int, text: str, url: str = "https://api.openai.com/v1/audio/transcriptions"):
    response = httpx.Response(
        status_code, text=text, request=httpx.Request("POST", url))
    return openai.APIStatusError(f"Error code: {status_code}", response=response, body=None)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_openai_client(transcript="word " * 150, content='{"summary":"ok","keyTakeaways":["a"]}'):
    client = Mock()
    client.audio.transcriptions.create.return_value = SimpleNamespace(
        text=transcript)
    client.chat.completions.create.return_value = completion(content)
    return client


@pytest.fixture
def repository():
    return InMemoryPodcastRepository([
        PodcastRecord(id=PODCAST_ID, title="Episode 1", audio_file_url=AUDIO_URL,
                      audio_file_name="episode.mp3", file_size=10 * 1024, user_id="user-1",
                      created_at="2024-05-01T10:00:00Z")
    ])


@pytest.fixture
def storage(tmp_path):
    audio_path = tmp_path / AUDIO_KEY
    audio_path.parent.mkdir(parents=True)
    audio_path.write_bytes(b"\x00" * 10 * 1024)
    return LocalFileStorageService(base_path=str(tmp_path))


@pytest.fixture
def openai_client():
    return make_openai_client()


@pytest.fixture
def pipeline(repository, storage, openai_client):
    return PodcastProcessingPipeline(
        repository=repository,
        retriever=AudioRetriever(storage),
        transcriber=WhisperTranscriber(openai_client),
        summarizer=ShowNotesSummarizer(openai_client)
    )
