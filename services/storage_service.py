import logging
import os
from typing import Protocol

import requests
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from models.errors import AudioNotFoundError, AudioTooLargeError, RetrievalError

# Read downloads in 4MB chunks so the size ceiling can abort early
CHUNK_SIZE = 4 * 1024 * 1024


class AudioStorageService(Protocol):
    """Protocol for object stores holding uploaded audio."""

    def download(self, key: str, max_bytes: int) -> bytes:
        """
        Download an object.

        Args:
            key: Storage key of the object
            max_bytes: Size ceiling, exceeding it raises AudioTooLargeError

        Returns:
            Raw object bytes
        """
        ...


class SupabaseStorageService:
    """Supabase Storage implementation (REST API, service role key)."""

    def __init__(self, supabase_url: str, service_key: str, bucket: str = "audio-files", timeout: int = 60):
        """
        Initialize the Supabase storage client.

        Args:
            supabase_url: Project URL, e.g. https://<ref>.supabase.co
            service_key: Service role key
            bucket: Bucket holding the uploaded audio
            timeout: Request timeout in seconds
        """
        self.base_url = f"{supabase_url.rstrip('/')}/storage/v1"
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout

    def download(self, key: str, max_bytes: int) -> bytes:
        url = f"{self.base_url}/object/{self.bucket}/{key}"
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }

        try:
            response = requests.get(
                url, headers=headers, stream=True, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Storage download error for {key}: {e}")
            raise RetrievalError(f"Failed to download audio file: {e}")

        with response:
            # Storage answers 400 with an embedded 404 for missing objects
            if response.status_code == 404 or (
                    response.status_code == 400 and "not found" in response.text.lower()):
                raise AudioNotFoundError(key)
            if response.status_code >= 400:
                logging.error(
                    f"Storage download error for {key}: {response.status_code} {response.text}")
                raise RetrievalError(
                    f"Failed to download audio file: {response.status_code} {response.text}")

            content_length = response.headers.get("Content-Length")
            if content_length and content_length.isdigit() and int(content_length) > max_bytes:
                raise AudioTooLargeError(int(content_length), max_bytes)

            data = bytearray()
            try:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    data.extend(chunk)
                    if len(data) > max_bytes:
                        raise AudioTooLargeError(len(data), max_bytes, at_least=True)
            except requests.exceptions.RequestException as e:
                logging.error(f"Storage download interrupted for {key}: {e}")
                raise RetrievalError(f"Failed to download audio file: {e}")

        return bytes(data)


class AzureBlobStorageService:
    """Azure Blob Storage implementation."""

    def __init__(self, connection_string: str, container_name: str = "audio-files", timeout: int = 60):
        """
        Initialize with Azure Storage connection string.

        Args:
            connection_string: Azure Storage connection string
            container_name: Container holding the uploaded audio
            timeout: Per-request timeout in seconds
        """
        self.connection_string = connection_string
        self.container_name = container_name
        self.timeout = timeout

    def download(self, key: str, max_bytes: int) -> bytes:
        # Initialize blob client
        blob_service_client = BlobServiceClient.from_connection_string(
            self.connection_string)
        blob_client = blob_service_client.get_blob_client(
            container=self.container_name, blob=key)

        try:
            # Size is known from the properties, no need to pull the payload first
            properties = blob_client.get_blob_properties(timeout=self.timeout)
            if properties.size > max_bytes:
                raise AudioTooLargeError(properties.size, max_bytes)

            return blob_client.download_blob(timeout=self.timeout).readall()
        except ResourceNotFoundError:
            raise AudioNotFoundError(key)
        except AzureError as e:
            logging.error(f"Blob download error for {key}: {e}")
            raise RetrievalError(f"Failed to download audio file: {e}")


class LocalFileStorageService:
    """Local file storage implementation for testing."""

    def __init__(self, base_path: str = "/tmp/local_storage"):
        """
        Initialize with base storage path.

        Args:
            base_path: Base path the storage keys are resolved against
        """
        self.base_path = base_path
        os.makedirs(base_path, exist_ok=True)

    def download(self, key: str, max_bytes: int) -> bytes:
        root = os.path.realpath(self.base_path)
        path = os.path.realpath(os.path.join(root, key))
        # Keys come from request URLs, never resolve outside the storage root
        if os.path.commonpath([root, path]) != root or not os.path.isfile(path):
            raise AudioNotFoundError(key)

        size = os.path.getsize(path)
        if size > max_bytes:
            raise AudioTooLargeError(size, max_bytes)

        with open(path, 'rb') as src:
            return src.read()
