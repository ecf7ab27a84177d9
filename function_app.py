import azure.functions as func
import logging
from dotenv import load_dotenv

from config import Config
from services.audio_retriever import AudioRetriever
from services.http_handlers import handle_podcast_stats, handle_process_audio
from services.openai_client import create_openai_client
from services.podcast_repository import SupabasePodcastRepository
from services.podcast_summarizer import ShowNotesSummarizer
from services.processing_pipeline import PodcastProcessingPipeline
from services.storage_service import (AzureBlobStorageService,
                                      LocalFileStorageService,
                                      SupabaseStorageService)
from services.whisper_transcriber import WhisperTranscriber

# Local runs read settings from .env, deployed apps from app settings
load_dotenv()

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def build_repository(config: Config) -> SupabasePodcastRepository:
    return SupabasePodcastRepository(
        supabase_url=config.supabase_url,
        service_key=config.supabase_service_key,
        table=config.podcasts_table
    )


def build_storage(config: Config):
    if config.storage_backend == "azure":
        return AzureBlobStorageService(
            connection_string=config.azure_storage_connection_string,
            container_name=config.azure_storage_container,
            timeout=config.retrieval_timeout
        )
    if config.storage_backend == "local":
        return LocalFileStorageService(base_path=config.local_storage_path)
    return SupabaseStorageService(
        supabase_url=config.supabase_url,
        service_key=config.supabase_service_key,
        bucket=config.audio_bucket,
        timeout=config.retrieval_timeout
    )


def build_pipeline(config: Config) -> PodcastProcessingPipeline:
    client = create_openai_client(config)
    return PodcastProcessingPipeline(
        repository=build_repository(config),
        retriever=AudioRetriever(
            build_storage(config), max_bytes=config.max_audio_bytes),
        transcriber=WhisperTranscriber(
            client,
            model=config.transcription_model,
            language=config.transcription_language,
            timeout=config.transcription_timeout
        ),
        summarizer=ShowNotesSummarizer(
            client,
            model=config.summarization_model,
            timeout=config.summarization_timeout
        )
    )


@app.route(route="process-audio", methods=["POST", "OPTIONS"])
def process_audio(req: func.HttpRequest) -> func.HttpResponse:
    """
    Transcribe an uploaded podcast and generate its show notes
    """
    logging.info("process-audio invoked")
    # Settings are read per invocation
    return handle_process_audio(req, lambda: build_pipeline(Config.from_env()))


@app.route(route="podcasts/stats", methods=["GET", "OPTIONS"])
def podcast_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Dashboard counters over the stored podcasts
    """
    return handle_podcast_stats(req, lambda: build_repository(Config.from_env()))
