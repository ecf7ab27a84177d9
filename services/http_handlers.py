import logging
from typing import Callable, Optional

import azure.functions as func

from models.errors import InputError
from models.podcast import PodcastStats
from models.response import (CORS_HEADERS, BaseResponse, ErrorResponse,
                             ProcessSuccessResponse, StatsResponse)
from services.podcast_repository import PodcastRepository
from services.processing_pipeline import PodcastProcessingPipeline


def json_response(response: BaseResponse) -> func.HttpResponse:
    return func.HttpResponse(
        response.to_json(),
        status_code=response.status_code,
        headers=dict(CORS_HEADERS),
        mimetype="application/json"
    )


def preflight_response() -> func.HttpResponse:
    return func.HttpResponse(status_code=200, headers=dict(CORS_HEADERS))


def handle_process_audio(
    req: func.HttpRequest,
    pipeline_factory: Callable[[], PodcastProcessingPipeline]
) -> func.HttpResponse:
    """
    Process one uploaded podcast.

    Expects a JSON body {podcastId, audioUrl, podcastTitle?}. Answers 200 with
    the processing summary, or 500 with {error, podcastId}. Nothing raises
    past this function.
    """
    if req.method == "OPTIONS":
        return preflight_response()

    podcast_id: Optional[str] = None
    try:
        # Credentials are checked before the body is even read
        pipeline = pipeline_factory()

        try:
            body = req.get_json()
        except ValueError:
            raise InputError("Request body must be valid JSON")
        if not isinstance(body, dict):
            raise InputError("Request body must be a JSON object")

        podcast_id = body.get("podcastId")
        audio_url = body.get("audioUrl")
        if not podcast_id or not audio_url:
            raise InputError("Missing podcastId or audioUrl in request body")

        result = pipeline.process(
            podcast_id, audio_url, body.get("podcastTitle"))
    except Exception as e:
        logging.error(f"ERROR: {e}")
        return json_response(ErrorResponse(error=str(e) or type(e).__name__, podcast_id=podcast_id))

    if not result.success:
        return json_response(ErrorResponse(error=result.error, podcast_id=podcast_id))

    return json_response(ProcessSuccessResponse(
        transcript_length=result.transcript_length,
        duration=result.duration
    ))


def handle_podcast_stats(
    req: func.HttpRequest,
    repository_factory: Callable[[], PodcastRepository]
) -> func.HttpResponse:
    """Dashboard counters, optionally restricted to one user (?userId=)."""
    if req.method == "OPTIONS":
        return preflight_response()

    try:
        repository = repository_factory()
        records = repository.list_podcasts(user_id=req.params.get("userId"))
    except Exception as e:
        logging.error(f"Error computing podcast stats: {e}")
        return json_response(ErrorResponse(error=str(e)))

    return json_response(StatsResponse(data=PodcastStats.from_records(records).to_dict()))
