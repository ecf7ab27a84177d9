import json
from unittest.mock import Mock

import pytest

from models.errors import StoreError
from models.show_notes import ShowNotes
from services.audio_retriever import AudioRetriever
from services.podcast_summarizer import ShowNotesSummarizer
from services.processing_pipeline import PodcastProcessingPipeline
from services.storage_service import LocalFileStorageService
from services.whisper_transcriber import WhisperTranscriber

from conftest import AUDIO_KEY, AUDIO_URL, PODCAST_ID, make_openai_client, status_error

TERMINAL_SEQUENCES = (
    ["pending", "processing", "completed"],
    ["pending", "processing", "failed"],
)


def test_successful_run_persists_results(pipeline, repository):
    result = pipeline.process(PODCAST_ID, AUDIO_URL, "Episode 1")

    assert result.success
    assert result.duration == 60
    assert result.transcript_length == len("word " * 150)

    record = repository.get_podcast(PODCAST_ID)
    assert record.processing_status == "completed"
    assert record.transcript == "word " * 150
    assert record.duration == 60
    assert record.key_takeaways == ["a"]
    assert record.timestamps == [
        {"title": "Full Episode", "timestamp": "00:00", "description": "Complete episode content"}]
    assert repository.status_history[PODCAST_ID] == TERMINAL_SEQUENCES[0]


def test_completed_record_holds_valid_show_notes(pipeline, repository):
    pipeline.process(PODCAST_ID, AUDIO_URL)

    record = repository.get_podcast(PODCAST_ID)
    assert isinstance(record.show_notes, str)
    notes = ShowNotes.model_validate_json(record.show_notes)
    assert notes.summary == "ok"
    assert len(notes.key_takeaways) >= 1


def test_partial_model_output_still_completes(repository, storage):
    client = make_openai_client(
        content='{"summary":"Good episode","keyTakeaways":["x","y"],"resources":["book"]}')
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert result.success
    notes = json.loads(repository.get_podcast(PODCAST_ID).show_notes)
    assert notes["chapters"] == [
        {"timestamp": "00:00", "title": "Full Episode", "description": "Complete episode content"}]
    assert notes["quotes"] == []
    assert notes["resources"] == ["book"]


def test_default_title_is_used_in_prompt(pipeline, openai_client):
    pipeline.process(PODCAST_ID, AUDIO_URL)

    user_message = openai_client.chat.completions.create.call_args.kwargs["messages"][1]
    assert "Title: Your Podcast" in user_message["content"]


def test_transcription_failure_marks_record_failed(repository, storage):
    client = make_openai_client()
    client.audio.transcriptions.create.side_effect = status_error(
        500, "server error")
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert not result.success
    assert result.error == "Whisper API failed: 500 server error"
    record = repository.get_podcast(PODCAST_ID)
    assert record.processing_status == "failed"
    assert record.transcript.startswith("Processing failed:")
    assert "Whisper API failed: 500" in record.transcript
    notes = ShowNotes.model_validate_json(record.show_notes)
    assert notes.key_takeaways == ["Upload failed - please retry"]
    assert repository.status_history[PODCAST_ID] == TERMINAL_SEQUENCES[1]
    client.chat.completions.create.assert_not_called()


def test_summarization_provider_error_marks_record_failed(repository, storage):
    client = make_openai_client()
    client.chat.completions.create.side_effect = status_error(
        401, "bad key", url="https://api.openai.com/v1/chat/completions")
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert not result.success
    assert repository.get_podcast(PODCAST_ID).processing_status == "failed"


def test_oversized_audio_never_reaches_provider(repository, tmp_path):
    (tmp_path / AUDIO_KEY).parent.mkdir(parents=True)
    (tmp_path / AUDIO_KEY).write_bytes(b"\x00" * 2048)
    client = make_openai_client()
    pipeline = PodcastProcessingPipeline(
        repository,
        AudioRetriever(LocalFileStorageService(str(tmp_path)), max_bytes=1024),
        WhisperTranscriber(client),
        ShowNotesSummarizer(client)
    )

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert not result.success
    assert "Audio file too large" in result.error
    assert client.audio.transcriptions.create.call_count == 0
    assert repository.get_podcast(PODCAST_ID).processing_status == "failed"


def test_invalid_audio_url_marks_record_failed(pipeline, repository, openai_client):
    result = pipeline.process(
        PODCAST_ID, "https://elsewhere.example.com/audio.mp3")

    assert result.error == "Invalid audio URL format"
    assert repository.get_podcast(PODCAST_ID).processing_status == "failed"
    openai_client.audio.transcriptions.create.assert_not_called()


def test_processing_is_persisted_before_any_external_call(storage):
    calls = []
    repository = Mock()
    repository.update_podcast.side_effect = lambda podcast_id, fields: calls.append(
        ("store", fields.get("processing_status")))
    retriever = AudioRetriever(storage)
    original_retrieve = retriever.retrieve

    def retrieve(url):
        calls.append(("retrieve", None))
        return original_retrieve(url)

    retriever.retrieve = retrieve
    client = make_openai_client()
    pipeline = PodcastProcessingPipeline(repository, retriever,
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    pipeline.process(PODCAST_ID, AUDIO_URL)

    assert calls[0] == ("store", "processing")
    assert calls[1] == ("retrieve", None)
    assert calls[-1] == ("store", "completed")


def test_completion_update_is_a_single_write(storage):
    repository = Mock()
    client = make_openai_client()
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    pipeline.process(PODCAST_ID, AUDIO_URL)

    assert repository.update_podcast.call_count == 2
    final_fields = repository.update_podcast.call_args.args[1]
    assert set(final_fields) == {"transcript", "show_notes", "key_takeaways",
                                 "timestamps", "duration", "processing_status"}


def test_failed_status_write_is_swallowed(storage):
    repository = Mock()
    repository.update_podcast.side_effect = [None, StoreError("db down"), StoreError("db down")]
    client = make_openai_client()
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert not result.success
    assert result.error == "db down"
    assert repository.update_podcast.call_count == 3


def test_unwritable_processing_status_stops_before_external_calls(storage):
    repository = Mock()
    repository.update_podcast.side_effect = StoreError("db down")
    client = make_openai_client()
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    result = pipeline.process(PODCAST_ID, AUDIO_URL)

    assert not result.success
    client.audio.transcriptions.create.assert_not_called()


@pytest.mark.parametrize("configure", [
    lambda client: None,
    lambda client: setattr(client.audio.transcriptions.create, "side_effect", status_error(500, "x")),
    lambda client: setattr(client.chat.completions.create, "side_effect", status_error(500, "x")),
    lambda client: setattr(client.chat.completions.create.return_value.choices[0].message, "content", "{}"),
])
def test_status_sequence_is_monotonic(repository, storage, configure):
    client = make_openai_client()
    configure(client)
    pipeline = PodcastProcessingPipeline(repository, AudioRetriever(storage),
                                         WhisperTranscriber(client), ShowNotesSummarizer(client))

    pipeline.process(PODCAST_ID, AUDIO_URL)

    assert repository.status_history[PODCAST_ID] in TERMINAL_SEQUENCES
