from openai import AzureOpenAI, OpenAI

import function_app
from config import Config
from services.openai_client import create_openai_client
from services.podcast_repository import SupabasePodcastRepository
from services.storage_service import (AzureBlobStorageService, LocalFileStorageService,
                                      SupabaseStorageService)


def make_config(**overrides):
    settings = dict(openai_api_key="sk-test", supabase_url="https://demo.supabase.co",
                    supabase_service_key="service-key")
    settings.update(overrides)
    return Config(**settings)


def test_openai_client_by_default():
    assert isinstance(create_openai_client(make_config()), OpenAI)


def test_azure_openai_client_when_endpoint_configured():
    client = create_openai_client(make_config(
        azure_openai_endpoint="https://demo.openai.azure.com"))

    assert isinstance(client, AzureOpenAI)


def test_storage_backend_selection(tmp_path):
    assert isinstance(function_app.build_storage(make_config()), SupabaseStorageService)
    assert isinstance(function_app.build_storage(make_config(
        storage_backend="local", local_storage_path=str(tmp_path))), LocalFileStorageService)
    assert isinstance(function_app.build_storage(make_config(
        storage_backend="azure", azure_storage_connection_string="conn")), AzureBlobStorageService)


def test_build_pipeline_wires_configuration(tmp_path):
    config = make_config(storage_backend="local", local_storage_path=str(tmp_path),
                         transcription_timeout=90, summarization_model="gpt-4o")

    pipeline = function_app.build_pipeline(config)

    assert isinstance(pipeline.repository, SupabasePodcastRepository)
    assert pipeline.retriever.max_bytes == 25 * 1024 * 1024
    assert pipeline.transcriber.timeout == 90
    assert pipeline.summarizer.model == "gpt-4o"
    assert pipeline.transcriber.client is pipeline.summarizer.client
