import logging
from dataclasses import dataclass
from typing import Optional

from models.podcast import ProcessingStatus
from models.show_notes import failed_show_notes
from services.audio_retriever import AudioRetriever
from services.podcast_repository import PodcastRepository
from services.podcast_summarizer import DEFAULT_TITLE, SummarizerInterface
from services.whisper_transcriber import TranscriberInterface, estimate_duration


@dataclass
class ProcessingResult:
    podcast_id: str
    success: bool
    transcript_length: int = 0
    duration: int = 0
    error: Optional[str] = None


class PodcastProcessingPipeline:
    """
    Turns an uploaded episode into a transcript and show notes.

    A run moves the podcast row from pending to processing, then to exactly
    one of completed or failed. The processing write happens before any
    external call, so an interrupted run stays visibly processing.

    Callers must not run the pipeline concurrently for the same podcast, nor
    re-run it on a row that already reached completed or failed; no lock is
    taken here.
    """

    def __init__(
        self,
        repository: PodcastRepository,
        retriever: AudioRetriever,
        transcriber: TranscriberInterface,
        summarizer: SummarizerInterface
    ):
        self.repository = repository
        self.retriever = retriever
        self.transcriber = transcriber
        self.summarizer = summarizer

    def process(self, podcast_id: str, audio_url: str, podcast_title: Optional[str] = None) -> ProcessingResult:
        """
        Run the pipeline for one podcast. Never raises.

        Args:
            podcast_id: Row to update
            audio_url: Public URL of the uploaded audio
            podcast_title: Episode title used in the prompt

        Returns:
            ProcessingResult describing the terminal state that was written
        """
        title = podcast_title or DEFAULT_TITLE
        logging.info(f"Processing podcast: {podcast_id} with audio: {audio_url}")

        try:
            self.repository.update_podcast(
                podcast_id, {"processing_status": ProcessingStatus.PROCESSING.value})
            logging.info("Updated podcast status to processing")

            audio = self.retriever.retrieve(audio_url)
            transcription = self.transcriber.transcribe(audio)
            duration = estimate_duration(transcription.text)
            show_notes = self.summarizer.summarize(transcription.text, title)

            self.repository.update_podcast(podcast_id, {
                "transcript": transcription.text,
                "show_notes": show_notes.to_json(),
                "key_takeaways": list(show_notes.key_takeaways),
                "timestamps": show_notes.chapter_dicts(),
                "duration": duration,
                "processing_status": ProcessingStatus.COMPLETED.value
            })
        except Exception as e:
            logging.exception(f"Processing failed for {podcast_id}: {e}")
            self._mark_failed(podcast_id, e)
            return ProcessingResult(podcast_id=podcast_id, success=False, error=str(e) or type(e).__name__)

        logging.info(
            f"Podcast processing completed successfully for: {podcast_id}")
        return ProcessingResult(
            podcast_id=podcast_id,
            success=True,
            transcript_length=len(transcription.text),
            duration=duration
        )

    def _mark_failed(self, podcast_id: str, error: Exception) -> None:
        message = str(error) or "Unknown error"
        try:
            self.repository.update_podcast(podcast_id, {
                "processing_status": ProcessingStatus.FAILED.value,
                "transcript": f"Processing failed: {message}. Please try uploading again.",
                "show_notes": failed_show_notes().to_json()
            })
        except Exception as e:
            # Best-effort: logged only, never re-raised
            logging.error(
                f"Failed to update podcast status: {type(e).__name__}: {e}")
