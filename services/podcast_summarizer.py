import json
import logging
from typing import Any, Optional, Protocol

import openai
from pydantic import ValidationError

from models.errors import ProviderError
from models.show_notes import ShowNotes, fallback_show_notes

SYSTEM_PROMPT = """You are an expert podcast content analyst. Create comprehensive show notes from this transcript.

Generate a JSON response with these exact fields:
- summary: A 2-3 paragraph overview of the episode
- keyTakeaways: Array of 5-7 important points as strings
- chapters: Array of chapters with title, timestamp (format: "MM:SS"), and description
- quotes: Array of 3-5 notable quotes with speaker and timestamp
- resources: Array of mentioned resources/links as strings
- socialCaptions: Array of 3-5 social media captions as strings

Format timestamps as "MM:SS" (e.g., "05:30"). Make the response valid JSON only."""

DEFAULT_TITLE = "Your Podcast"


def build_user_prompt(transcript: str, title: str) -> str:
    return (
        "Please analyze this podcast transcript and create show notes:\n\n"
        f"Title: {title}\n\n"
        f"Transcript:\n{transcript}"
    )


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()
    # Opening fence may carry a language tag, e.g. ```json
    lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    elif lines and lines[-1].rstrip().endswith("```"):
        # Closing fence glued to the last line of JSON
        lines[-1] = lines[-1].rstrip()[:-3]
    return "\n".join(lines).strip()


def parse_show_notes(content: Optional[str], title: str) -> ShowNotes:
    """
    Turn raw model output into a renderable ShowNotes document.

    The document is rejected as a whole (replaced by the generic fallback)
    only when it is not a JSON object, has no usable summary or has no
    keyTakeaways list. Otherwise each optional field degrades on its own.
    """
    if not content:
        logging.warning("Model returned no content, using fallback show notes")
        return fallback_show_notes(title)

    try:
        parsed = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        logging.warning(f"Failed to parse show notes JSON, using fallback: {e}")
        return fallback_show_notes(title)

    if not isinstance(parsed, dict):
        logging.warning("Show notes JSON is not an object, using fallback")
        return fallback_show_notes(title)

    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip() or not isinstance(parsed.get("keyTakeaways"), list):
        logging.warning(
            "Show notes JSON is missing summary or keyTakeaways, using fallback")
        return fallback_show_notes(title)

    document = {"summary": summary, "keyTakeaways": parsed["keyTakeaways"]}
    for field_name in ("chapters", "quotes", "resources", "socialCaptions"):
        if isinstance(parsed.get(field_name), list):
            document[field_name] = parsed[field_name]
        elif field_name in parsed:
            logging.warning(
                f"Show notes field {field_name} is not a list, using default")

    try:
        return ShowNotes.model_validate(document)
    except ValidationError as e:
        logging.warning(f"Show notes failed validation, using fallback: {e}")
        return fallback_show_notes(title)


class SummarizerInterface(Protocol):
    """Protocol for show notes generation services."""

    def summarize(self, transcript: str, title: str) -> ShowNotes:
        """
        Generate show notes for a transcript.

        Args:
            transcript: Full transcript text
            title: Episode title, included in the prompt

        Returns:
            ShowNotes document, never None
        """
        ...


class ShowNotesSummarizer:
    """OpenAI chat completion based show notes generator."""

    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o-mini",
        timeout: float = 60,
        temperature: float = 0.3,
        max_tokens: int = 2000
    ):
        """
        Initialize the summarizer.

        Args:
            client: OpenAI or AzureOpenAI client
            model: Chat model (deployment name on Azure)
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_tokens: Completion token limit
        """
        self.client = client
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    def summarize(self, transcript: str, title: str = DEFAULT_TITLE) -> ShowNotes:
        """
        Generate show notes using the chat completions API.

        Only a failed provider call raises (ProviderError); malformed output
        degrades to fallback content.
        """
        logging.info(
            f"Generating show notes with {self.model} for {len(transcript)} characters")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(transcript, title)}
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout
            )
        except openai.APIStatusError as e:
            logging.error(f"GPT API error: {e.status_code} {e.response.text}")
            raise ProviderError(e.status_code, e.response.text, provider="GPT API")
        except openai.APIConnectionError as e:
            logging.error(f"GPT API unreachable: {e}")
            raise ProviderError(None, str(e), provider="GPT API")

        logging.info("Show notes generated successfully")
        return parse_show_notes(_message_content(response), title)


def _message_content(response: Any) -> Optional[str]:
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None
