import copy
from dataclasses import asdict
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from models.errors import StoreError
from models.podcast import PodcastRecord, ProcessingStatus


class PodcastRepository(Protocol):
    """Protocol for the store holding podcast rows."""

    def update_podcast(self, podcast_id: str, fields: Dict[str, Any]) -> None:
        """
        Apply a single atomic update to one podcast row.

        Raises:
            StoreError: If the update was rejected
        """
        ...

    def get_podcast(self, podcast_id: str) -> Optional[PodcastRecord]:
        ...

    def list_podcasts(self, user_id: Optional[str] = None) -> List[PodcastRecord]:
        ...


class SupabasePodcastRepository:
    """Podcast rows stored in Supabase, accessed through the PostgREST API."""

    def __init__(self, supabase_url: str, service_key: str, table: str = "podcasts", timeout: int = 30):
        """
        Args:
            supabase_url: Project URL, e.g. https://<ref>.supabase.co
            service_key: Service role key (bypasses row level security)
            table: Table holding podcast rows
            timeout: Request timeout in seconds
        """
        self.base_url = f"{supabase_url.rstrip('/')}/rest/v1/{table}"
        self.service_key = service_key
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }

    def update_podcast(self, podcast_id: str, fields: Dict[str, Any]) -> None:
        headers = self._headers()
        headers["Prefer"] = "return=minimal"
        try:
            response = requests.patch(
                self.base_url,
                params={"id": f"eq.{podcast_id}"},
                headers=headers,
                json=fields,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logging.error(f"Database update error for {podcast_id}: {e}")
            raise StoreError(f"Failed to update podcast {podcast_id}: {e}")

    def get_podcast(self, podcast_id: str) -> Optional[PodcastRecord]:
        rows = self._select({"id": f"eq.{podcast_id}", "select": "*"})
        if not rows:
            return None
        return PodcastRecord.from_row(rows[0])

    def list_podcasts(self, user_id: Optional[str] = None) -> List[PodcastRecord]:
        params = {"select": "*", "order": "created_at.desc"}
        if user_id:
            params["user_id"] = f"eq.{user_id}"
        return [PodcastRecord.from_row(row) for row in self._select(params)]

    def _select(self, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = requests.get(
                self.base_url, params=params, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.error(f"Database query error: {e}")
            raise StoreError(f"Failed to query podcasts: {e}")


class InMemoryPodcastRepository:
    """In-memory store for local runs and tests.

    Keeps every processing_status written per podcast in status_history.
    """

    def __init__(self, records: Optional[List[PodcastRecord]] = None):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.status_history: Dict[str, List[str]] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: PodcastRecord) -> None:
        row = asdict(record)
        row["processing_status"] = ProcessingStatus(
            record.processing_status).value
        self.rows[record.id] = row
        self.status_history[record.id] = [row["processing_status"]]

    def update_podcast(self, podcast_id: str, fields: Dict[str, Any]) -> None:
        if podcast_id not in self.rows:
            raise StoreError(f"Podcast {podcast_id} does not exist")
        update = copy.deepcopy(fields)
        if "processing_status" in update:
            update["processing_status"] = ProcessingStatus(
                update["processing_status"]).value
            self.status_history[podcast_id].append(update["processing_status"])
        self.rows[podcast_id].update(update)

    def get_podcast(self, podcast_id: str) -> Optional[PodcastRecord]:
        row = self.rows.get(podcast_id)
        return PodcastRecord.from_row(row) if row else None

    def list_podcasts(self, user_id: Optional[str] = None) -> List[PodcastRecord]:
        rows = [row for row in self.rows.values()
                if user_id is None or row.get("user_id") == user_id]
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return [PodcastRecord.from_row(row) for row in rows]
