import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PodcastRecord:
    """One row of the podcasts table."""

    id: str
    title: str = ""
    description: str = ""
    audio_file_url: Optional[str] = None
    audio_file_name: Optional[str] = None
    file_size: Optional[int] = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    transcript: Optional[str] = None
    # Stored as a JSON string, the dashboard parses it client-side
    show_notes: Optional[str] = None
    key_takeaways: List[str] = field(default_factory=list)
    timestamps: List[Dict[str, Any]] = field(default_factory=list)
    duration: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PodcastRecord":
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            audio_file_url=row.get("audio_file_url"),
            audio_file_name=row.get("audio_file_name"),
            file_size=row.get("file_size"),
            processing_status=ProcessingStatus(
                row.get("processing_status") or ProcessingStatus.PENDING.value),
            transcript=row.get("transcript"),
            show_notes=row.get("show_notes"),
            key_takeaways=list(row.get("key_takeaways") or []),
            timestamps=list(row.get("timestamps") or []),
            duration=row.get("duration"),
            user_id=row.get("user_id"),
            created_at=row.get("created_at"),
        )


@dataclass
class PodcastStats:
    """Dashboard counters over a set of podcasts."""

    total_podcasts: int = 0
    completed: int = 0
    processing: int = 0
    pending: int = 0
    failed: int = 0
    total_hours: int = 0

    @classmethod
    def from_records(cls, records: Iterable[PodcastRecord]) -> "PodcastStats":
        stats = cls()
        total_seconds = 0
        for record in records:
            stats.total_podcasts += 1
            status = record.processing_status
            if status == ProcessingStatus.COMPLETED:
                stats.completed += 1
            elif status == ProcessingStatus.PROCESSING:
                stats.processing += 1
            elif status == ProcessingStatus.FAILED:
                stats.failed += 1
            else:
                stats.pending += 1
            total_seconds += record.duration or 0
        # Half hours round up, matching the dashboard
        stats.total_hours = math.floor(total_seconds / 3600 + 0.5)
        return stats

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalPodcasts": self.total_podcasts,
            "completed": self.completed,
            "processing": self.processing,
            "pending": self.pending,
            "failed": self.failed,
            "totalHours": self.total_hours,
        }
