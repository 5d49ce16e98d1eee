"""
Schedule Narrator

HTTP client that asks an OpenAI-compatible chat-completions endpoint for a
short coaching comment about today's plan. Narration is optional and
external to the scheduler: any failure leaves the computed schedule intact
and simply yields no commentary.

Usage:
    async with ScheduleNarrator(settings.get_narrator_config()) as narrator:
        result = await attach_commentary(result, narrator)
"""

from __future__ import annotations

import dataclasses
from typing import Any

import httpx
from loguru import logger

from mindvault.core.errors import NarrationError
from mindvault.core.modes import NarratorConfig
from mindvault.study.models import ScheduleDay, ScheduleResult

SYSTEM_PROMPT = (
    "You are MindVault's study coach. Generate a brief, encouraging commentary "
    "(2-3 sentences max) about the user's study schedule. Be specific about "
    "subjects and times. Focus on motivation and practical tips. "
    "No greetings or sign-offs."
)

EMPTY_DAY_MESSAGE = (
    "No study sessions scheduled for today. Consider adding exams and notes "
    "to generate a personalized plan!"
)


def build_prompt(day: ScheduleDay) -> str:
    """User prompt describing one day's slots and friction notes."""
    lines = [
        f"{slot.start}-{slot.end}: {slot.type.value.upper()} {slot.subject or 'General'}"
        for slot in day.slots
    ]
    prompt = "Today's study schedule:\n" + "\n".join(lines)
    if day.friction_notes:
        prompt += "\nNote: " + ". ".join(day.friction_notes)
    return prompt + "\n\nProvide a brief motivational insight about this plan."


class ScheduleNarrator:
    """
    Async client for schedule narration.

    The httpx client can be injected (tests, shared connection pools);
    otherwise one is created on first use and closed with the narrator.
    """

    def __init__(self, config: NarratorConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "ScheduleNarrator":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"

            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def narrate(self, day: ScheduleDay) -> str:
        """
        Generate commentary for one day.

        Raises:
            NarrationError: If the narrator is unconfigured or the response
                carries no text
            httpx.HTTPError: On transport or HTTP status errors
        """
        if not day.slots:
            return EMPTY_DAY_MESSAGE
        if not self.config.is_configured:
            raise NarrationError("Narrator API key not configured")

        client = await self._ensure_client()
        response = await client.post(
            self.config.completions_endpoint,
            json={
                "model": self.config.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(day)},
                ],
                "max_tokens": self.config.max_tokens,
                "temperature": self.config.temperature,
            },
        )
        response.raise_for_status()

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise NarrationError(f"Malformed narration response: {e}") from e

        if content is None:
            content = ""
        if not isinstance(content, str):
            raise NarrationError(f"Narration content is {type(content).__name__}, not text")

        text = content.strip()
        if not text:
            raise NarrationError("Narration response was empty")
        return text


async def attach_commentary(
    result: ScheduleResult,
    narrator: ScheduleNarrator,
    date: str | None = None,
) -> ScheduleResult:
    """
    Return a copy of `result` with AI commentary on one day.

    The input is never modified. If the day is missing or narration fails,
    the input result is returned unchanged.

    Args:
        result: Generated schedule
        narrator: Narration client
        date: ISO date to narrate (defaults to the run's "today")
    """
    target = date or result.summary.today
    day = result.get_day(target)
    if day is None:
        logger.debug(f"No schedule day {target}; skipping narration")
        return result

    try:
        commentary = await narrator.narrate(day)
    except (NarrationError, httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Failed to generate AI commentary: {e}")
        return result

    days = [
        dataclasses.replace(d, ai_commentary=commentary) if d is day else d
        for d in result.days
    ]
    return dataclasses.replace(result, days=days)
