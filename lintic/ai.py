"""Language model access: generating fixes and summarizing them."""
from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lintic.config import ModelConfig
from lintic.errors import AIError
from lintic.errors import LinticError
from lintic.models import FixResult
from lintic.models import Offense
from lintic.output import logger
from lintic.prompts import build_fix_prompt
from lintic.prompts import build_summary_prompt

NO_SUMMARY = 'No summary available.'
SUMMARY_UNAVAILABLE = 'Summary unavailable: the AI model could not describe these changes.'

FENCE = '```'


def content_changed(original: str, fixed: str) -> bool:
    """Check whether a fix changes anything beyond surrounding whitespace."""
    return original.strip() != fixed.strip()


def with_final_newline(text: str) -> str:
    """End text with exactly one newline, as RuboCop expects of a source file."""
    return text.rstrip('\n') + '\n'


def has_unclosed_fence(text: str) -> bool:
    """Check whether a code fence was opened but never closed."""
    return text.count(FENCE) % 2 == 1


# =============================================================================
# Chat Completion Client
# =============================================================================


class ChatClient:
    """Client for an OpenAI-compatible chat completion endpoint (Ollama by default)."""

    def __init__(self, config: ModelConfig) -> None:
        self.config = config
        base = config.uri if config.uri.endswith('/') else f'{config.uri}/'
        self.endpoint = f'{base}chat/completions'

    def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float | None = None,
    ) -> str | None:
        """Send a single user message and return the reply text, if any."""
        data = json.dumps({
            'model': self.config.name,
            'messages': [{'role': 'user', 'content': prompt}],
            'temperature': self.config.temperature if temperature is None else temperature,
            'max_tokens': max_tokens,
        }).encode('utf-8')

        req = urllib.request.Request(
            self.endpoint,
            data=data,
            headers={
                'Content-Type': 'application/json',
                'Authorization': f'Bearer {self.config.api_key}',
            },
        )
        logger.debug(f'Requesting completion from {self.config.name}')

        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as response:
                result = json.loads(response.read().decode('utf-8'))
        except urllib.error.HTTPError as e:
            raise AIError(f'AI request failed with status {e.code}: {e.reason}') from e
        except (urllib.error.URLError, OSError) as e:
            raise AIError(f'AI request failed: {e}') from e
        except json.JSONDecodeError as e:
            raise AIError('AI response was not valid JSON') from e

        return _message_content(result)


def _message_content(result: Any) -> str | None:
    """Dig choices[0].message.content out of a completion response."""
    try:
        content = result['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


# =============================================================================
# Response Parsing
# =============================================================================


class ResponseFormat(Enum):
    """How a fixed file was recognized in a model reply."""
    FENCED_TYPED = 'fenced_typed'
    FENCED_GENERIC = 'fenced_generic'
    KEYWORD_HEURISTIC = 'keyword_heuristic'
    RAW = 'raw'


@dataclass(frozen=True)
class ParsedResponse:
    """Code extracted from a model reply and the strategy that found it."""
    code: str
    format: ResponseFormat


class ResponseStrategy(ABC):
    """One way of recognizing code in a model reply."""

    format: ResponseFormat
    # Logged when this strategy is the one that matched
    warning: str | None = None
    # Whether the strategy only reads complete fenced blocks
    fenced: bool = False

    @abstractmethod
    def extract(self, text: str) -> str | None:
        """Return the code found in text, or None when this strategy does not apply."""


class FencedTypedStrategy(ResponseStrategy):
    """First fenced block tagged as Ruby."""

    format = ResponseFormat.FENCED_TYPED
    fenced = True
    pattern = re.compile(r'```(?:ruby|rb)\b[^\S\n]*\n?(.*?)```', re.DOTALL | re.IGNORECASE)

    def extract(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
        return None


class FencedGenericStrategy(ResponseStrategy):
    """First fenced block of any language."""

    format = ResponseFormat.FENCED_GENERIC
    fenced = True
    # The language tag and the newline after it are both optional
    pattern = re.compile(r'```[^\S\n]*(?:[\w+#.-]*\n)?(.*?)```', re.DOTALL)

    def extract(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
        return None


class KeywordHeuristicStrategy(ResponseStrategy):
    """Unfenced text that looks like Ruby source."""

    format = ResponseFormat.KEYWORD_HEURISTIC
    warning = 'AI response did not contain a code block, but looks like Ruby code'
    pattern = re.compile(
        r'^\s*(?:def|class|module|require|require_relative)\b',
        re.MULTILINE,
    )

    def extract(self, text: str) -> str | None:
        stripped = text.strip()
        if stripped.startswith('#') or self.pattern.search(stripped):
            return stripped
        return None


class RawStrategy(ResponseStrategy):
    """The whole reply, verbatim."""

    format = ResponseFormat.RAW
    warning = 'AI response did not contain a code block, using full response'

    def extract(self, text: str) -> str | None:
        return text.strip()


# Tried in this order; the first strategy that returns code wins
RESPONSE_STRATEGIES: tuple[ResponseStrategy, ...] = (
    FencedTypedStrategy(),
    FencedGenericStrategy(),
    KeywordHeuristicStrategy(),
    RawStrategy(),
)


def parse_response(
    content: str | None,
    strategies: tuple[ResponseStrategy, ...] = RESPONSE_STRATEGIES,
) -> ParsedResponse:
    """Extract the fixed file from a model reply."""
    if content is None or not content.strip():
        raise AIError('No content received from AI model')

    for strategy in strategies:
        # A reply cut off at max_tokens leaves its fence open and its file incomplete
        if not strategy.fenced and has_unclosed_fence(content):
            raise AIError('AI response has an unclosed code block, it was likely cut off')
        code = strategy.extract(content)
        if code is not None:
            if strategy.warning:
                logger.warning(strategy.warning)
            logger.debug(f'Parsed AI response as {strategy.format.value}')
            return ParsedResponse(code=code, format=strategy.format)

    raise AIError('AI response could not be parsed')


def extract_fixed_code(content: str | None) -> str:
    """Extract the fixed file text from a model reply."""
    return parse_response(content).code


# =============================================================================
# Fixer and Summary Generator
# =============================================================================


class SummaryGenerator:
    """Asks the model to explain a fix in prose. Never fails the caller."""

    def __init__(self, client: ChatClient, max_tokens: int = 1000) -> None:
        self.client = client
        self.max_tokens = max_tokens

    def summarize(self, original: str, fixed: str, offenses: list[Offense]) -> str:
        """Return a human-readable summary of the changes between original and fixed."""
        if not original.strip() or not fixed.strip():
            return NO_SUMMARY

        prompt = build_summary_prompt(original, fixed, offenses)
        try:
            content = self.client.complete(prompt, max_tokens=self.max_tokens)
        except LinticError as e:
            logger.warning(f'Could not generate fix summary: {e}')
            return SUMMARY_UNAVAILABLE

        if not content or not content.strip():
            logger.warning('AI model returned an empty fix summary')
            return SUMMARY_UNAVAILABLE
        return content.strip()


class LintFixer:
    """Generates a corrected file for a set of offenses."""

    def __init__(
        self,
        client: ChatClient,
        summarizer: SummaryGenerator,
        max_tokens: int = 4000,
    ) -> None:
        self.client = client
        self.summarizer = summarizer
        self.max_tokens = max_tokens

    def fix(
        self,
        file_content: str,
        offenses: list[Offense],
        file_diff: str | None = None,
    ) -> FixResult:
        """Ask the model for a fixed version of file_content.

        Raises AIError when the model cannot be reached, replies with
        nothing, or leaves a code block unclosed. Content taken from the
        model always ends with a single newline.
        """
        if not offenses:
            return FixResult(fixed_content=file_content, summary=None)

        prompt = build_fix_prompt(file_content, offenses, file_diff)
        try:
            content = self.client.complete(prompt, max_tokens=self.max_tokens)
            fixed_content = extract_fixed_code(content)
        except AIError as e:
            logger.error(f'AI fix generation failed: {e}')
            raise

        fixed_content = with_final_newline(fixed_content)

        # Nothing will be published, so there is nothing to explain
        if not content_changed(file_content, fixed_content):
            return FixResult(fixed_content=fixed_content, summary=NO_SUMMARY)

        summary = self.summarizer.summarize(file_content, fixed_content, offenses)
        return FixResult(fixed_content=fixed_content, summary=summary)
