import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@dataclass
class BaseResponse:
    """Base response model."""

    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())


@dataclass
class ProcessSuccessResponse(BaseResponse):
    """Body returned once a podcast has been processed."""

    transcript_length: int = 0
    duration: int = 0
    message: str = "Podcast processed successfully"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "transcriptLength": self.transcript_length,
            "showNotesGenerated": True,
            "duration": self.duration,
        }


@dataclass
class ErrorResponse(BaseResponse):
    """Error response model."""

    status_code: int = 500
    error: str = "Unknown error"
    podcast_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "podcastId": self.podcast_id}


@dataclass
class StatsResponse(BaseResponse):
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.data or {})
