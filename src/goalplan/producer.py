"""Task producers: the OpenAI-backed generator and the template fallback.

A producer turns goal text and a day budget into an unscheduled task list.
Whatever the AI producer does wrong (network error, timeout, non-JSON reply,
empty list) ends in the template fallback, never in a user-facing failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import date
from typing import Any, Protocol

from openai import AsyncOpenAI

from goalplan.config import Settings
from goalplan.errors import ProducerError
from goalplan.models import RawTask
from goalplan.templates import fallback_tasks, match_template

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert project planner. Create detailed, topic-specific project plans "
    "with comprehensive task breakdowns. Return only valid JSON."
)

USER_PROMPT = """Break down the following goal into detailed, actionable tasks.

Goal: "{goal}"
Time Constraint: {total_days:g} days
{due_line}
Return a JSON object with this structure:
{{
  "tasks": [
    {{
      "title": "Specific task name relevant to the goal",
      "description": "What needs to be done and delivered.",
      "category": "Planning|Design|Development|Testing|Deployment",
      "priority": "High|Medium|Low",
      "estimatedDurationDays": 2.5,
      "dependsOn": [0, 1]
    }}
  ]
}}

Rules:
- Tasks must be specific to the goal, 8-15 of them.
- dependsOn lists indices of earlier tasks in the same array.
- Tasks must fit within {total_days:g} days once dependencies are accounted for.
- High priority = critical path items, Medium = important but not blocking,
  Low = nice-to-have or final polish.

Return ONLY valid JSON."""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class TaskProducer(Protocol):
    name: str

    async def produce(self, goal_text: str, total_days: float, due_date: date | None) -> list[RawTask]:
        ...


def render_user_prompt(goal_text: str, total_days: float, due_date: date | None) -> str:
    due_line = f"Due Date: {due_date.isoformat()}\n" if due_date else ""
    return USER_PROMPT.format(goal=goal_text, total_days=total_days, due_line=due_line)


def parse_task_list(content: str) -> list[RawTask]:
    """Extract ``{"tasks": [...]}`` from a model reply, tolerating surrounding prose."""
    match = _JSON_OBJECT.search(content or "")
    raw_json = match.group(0) if match else (content or "")
    try:
        obj = json.loads(raw_json)
    except json.JSONDecodeError as e:
        snippet = (content or "")[:200]
        raise ProducerError(f"Producer reply is not JSON. First 200 chars: {snippet}") from e

    records = obj.get("tasks") if isinstance(obj, dict) else None
    if not isinstance(records, list):
        raise ProducerError("Producer reply has no 'tasks' list")

    tasks = [RawTask.from_dict(r, i) for i, r in enumerate(records) if isinstance(r, dict)]
    if not tasks:
        raise ProducerError("Producer returned no tasks")
    return tasks


class OpenAITaskProducer:
    """Chat-completions call to OpenAI, parsed into raw tasks."""

    name = "openai"

    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self.settings = settings
        self._client = client

    def _new_client(self) -> AsyncOpenAI:
        kwargs: dict[str, Any] = {
            "api_key": self.settings.openai_api_key,
            "timeout": self.settings.request_timeout,
            "max_retries": 0,
        }
        if self.settings.base_url:
            kwargs["base_url"] = self.settings.base_url
        return AsyncOpenAI(**kwargs)

    async def produce(self, goal_text: str, total_days: float, due_date: date | None) -> list[RawTask]:
        if self._client is not None:
            return await self._request(self._client, goal_text, total_days, due_date)
        # clients created here are closed after the call
        async with self._new_client() as client:
            return await self._request(client, goal_text, total_days, due_date)

    async def _request(self, client: Any, goal_text: str, total_days: float, due_date: date | None) -> list[RawTask]:
        resp = await client.chat.completions.create(
            model=self.settings.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": render_user_prompt(goal_text, total_days, due_date)},
            ],
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )
        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise ProducerError("Unexpected response shape from OpenAI") from e
        return parse_task_list(content.strip())


async def produce_tasks(
    goal_text: str,
    total_days: float,
    due_date: date | None = None,
    *,
    producer: TaskProducer | None = None,
    settings: Settings | None = None,
) -> tuple[list[RawTask], str]:
    """Run the primary producer, falling back to templates. Returns (tasks, source)."""
    settings = settings or Settings.from_env()
    if producer is None and settings.ai_enabled:
        producer = OpenAITaskProducer(settings)

    if producer is not None:
        try:
            tasks = await asyncio.wait_for(
                producer.produce(goal_text, total_days, due_date),
                timeout=settings.request_timeout,
            )
            if not tasks:
                raise ProducerError("Producer returned no tasks")
            logger.info("Producer %s returned %d tasks", producer.name, len(tasks))
            return tasks, producer.name
        except Exception as e:
            logger.warning("Task producer %s failed, using fallback: %s", producer.name, e)
    else:
        logger.info("No AI producer configured; using template fallback")

    template_name, _ = match_template(goal_text)
    return fallback_tasks(goal_text, total_days), f"template:{template_name}"
