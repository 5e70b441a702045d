"""
CommitAnalyzer - the per-commit async transform fed to the worker pool.

Per-commit failures are caught and returned inside the CommitAnalysis, so a
single bad commit never stops the scan. Errors that would fail every commit
the same way (bad credentials, unknown model) are raised instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import openai
import tenacity as tc

from commitscan.core.errors import CommitScanError, ResponseParseError
from commitscan.core.types import Commit, CommitAnalysis
from commitscan.git.history import GitRepository

from .parsing import parse_verdict

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

QUESTION_TEMPLATE = """
```
{commit_description}
```

Does this code commit look suspicious? Could it have inserted a means of stealing a private key? (Bad entropy for key generation, sending key to server, etc)

Respond in the following format. Confidence should be a percent between 0-100% representing the likeliness that it introduced a means of key compromise based on the information available. Reasoning should explain the number.
Confidence: [percent number here]
Reasoning: [reasoning for your determination here]
"""

# Retried with backoff before giving up on a commit
TRANSIENT_API_ERRORS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,
)

# Would fail every commit the same way: end the whole scan
FATAL_API_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.NotFoundError,
)


class CommitAnalyzer:
    """
    Asks a chat model whether a commit could compromise private keys.

    Usage:
        analyzer = CommitAnalyzer(client, "gpt-4o-mini", repo)
        result = await analyzer.analyze(commit)
        if not result.failed:
            print(result.confidence, result.reasoning)
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        repository: GitRepository,
        *,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_backoff_seconds: float = 30.0,
        jitter: float = 1.0,
        temperature: float | None = 0.0,
    ):
        self.client = client
        self.model = model
        self.repository = repository
        self.temperature = temperature
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.with_retry = tc.AsyncRetrying(
            stop=tc.stop_after_attempt(max_retries),
            wait=tc.wait_exponential_jitter(
                initial=base_delay,
                max=max_backoff_seconds,
                jitter=jitter,
            ),
            retry=tc.retry_if_exception_type(TRANSIENT_API_ERRORS),
            before_sleep=tc.before_sleep_log(self.logger, logging.WARNING),
            reraise=True,
        ).wraps

    async def _complete(self, prompt: str) -> str:
        kwargs = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        if not response.choices:
            raise ResponseParseError("Model returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ResponseParseError("Model returned an empty answer")
        return content

    async def ask(self, commit_description: str) -> str:
        """Send the question for one ``git show`` text, with retries."""
        prompt = QUESTION_TEMPLATE.format(commit_description=commit_description)
        return await self.with_retry(self._complete)(prompt)

    async def analyze(self, commit: Commit) -> CommitAnalysis:
        try:
            description = await self.repository.show(commit.hash)
            text = await self.ask(description)
        except FATAL_API_ERRORS:
            raise
        except (openai.APIError, CommitScanError) as e:
            self.logger.debug(f"Analysis of {commit.short_hash} failed: {e}")
            return CommitAnalysis(commit=commit, error=e)

        confidence, reasoning = parse_verdict(text)
        return CommitAnalysis(
            commit=commit,
            response=text,
            confidence=confidence,
            reasoning=reasoning,
        )

    __call__ = analyze
