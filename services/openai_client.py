from typing import Union

from openai import AzureOpenAI, OpenAI

from config import Config


def create_openai_client(config: Config) -> Union[OpenAI, AzureOpenAI]:
    """
    Build the client shared by transcription and summarization.

    An Azure OpenAI endpoint takes precedence; model names are then
    interpreted as deployment names.
    """
    if config.azure_openai_endpoint:
        return AzureOpenAI(
            azure_endpoint=config.azure_openai_endpoint,
            api_key=config.openai_api_key,
            api_version=config.azure_openai_api_version
        )

    if config.openai_base_url:
        return OpenAI(api_key=config.openai_api_key, base_url=config.openai_base_url)
    return OpenAI(api_key=config.openai_api_key)
