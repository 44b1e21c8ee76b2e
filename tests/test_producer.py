import asyncio
from types import SimpleNamespace

import pytest

from goalplan.config import Settings
from goalplan.errors import ProducerError
from goalplan.models import RawTask, TaskCategory, TaskPriority
from goalplan.producer import OpenAITaskProducer, parse_task_list, produce_tasks, render_user_prompt
from goalplan.templates import GENERIC, fallback_tasks, match_template


class FailingProducer:
    name = "broken"

    async def produce(self, goal_text, total_days, due_date):
        raise ConnectionError("service unavailable")


class SlowProducer:
    name = "slow"

    async def produce(self, goal_text, total_days, due_date):
        await asyncio.sleep(5)
        return [RawTask(title="never")]


class EmptyProducer:
    name = "empty"

    async def produce(self, goal_text, total_days, due_date):
        return []


class FixedProducer:
    name = "fixed"

    async def produce(self, goal_text, total_days, due_date):
        return [RawTask(title="Only task", estimated_duration_days=total_days)]


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _fake_client(content):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content)))


@pytest.mark.parametrize(
    "goal_text, template, count",
    [
        ("Launch our new mobile APP", "product", 12),
        ("Spring promotion for the store", "marketing", 9),
        ("Organize a team workshop", "event", 9),
        ("Learn to play the cello", "generic", 10),
    ],
)
def test_fallback_template_selection(goal_text, template, count):
    name, steps = match_template(goal_text)
    assert name == template
    assert len(steps) == count


def test_fallback_durations_are_fractions_of_budget():
    tasks = fallback_tasks("anything", 20)
    assert [t.estimated_duration_days for t in tasks] == pytest.approx([20 * s.fraction for s in GENERIC])
    assert tasks[0].depends_on == []
    assert tasks[1].depends_on == [0]


def test_no_api_key_goes_straight_to_fallback():
    tasks, source = asyncio.run(produce_tasks("Launch a website", 14, settings=Settings()))
    assert source == "template:product"
    assert tasks[0].title == "Market research and competitive analysis"


def test_failing_producer_falls_back():
    tasks, source = asyncio.run(
        produce_tasks("Plan a conference", 10, producer=FailingProducer(), settings=Settings())
    )
    assert source == "template:event"
    assert len(tasks) == 9


def test_timeout_falls_back():
    settings = Settings(request_timeout=0.01)
    tasks, source = asyncio.run(produce_tasks("Write a book", 10, producer=SlowProducer(), settings=settings))
    assert source == "template:generic"
    assert tasks


def test_empty_producer_result_falls_back():
    _, source = asyncio.run(produce_tasks("Write a book", 10, producer=EmptyProducer(), settings=Settings()))
    assert source == "template:generic"


def test_working_producer_is_used():
    tasks, source = asyncio.run(produce_tasks("Write a book", 10, producer=FixedProducer(), settings=Settings()))
    assert source == "fixed"
    assert [t.title for t in tasks] == ["Only task"]


def test_parse_task_list_tolerates_prose_and_bad_records():
    content = 'Sure! Here is the plan:\n{"tasks": [{"title": "A", "priority": "Low", "dependsOn": []}, 42, {"category": "Testing"}]}\nGood luck.'
    tasks = parse_task_list(content)
    assert [t.title for t in tasks] == ["A", "Task 3"]
    assert tasks[0].priority == TaskPriority.LOW
    assert tasks[1].category == TaskCategory.TESTING


@pytest.mark.parametrize("content", ["not json at all", '{"plan": []}', '{"tasks": []}', "[1, 2]"])
def test_parse_task_list_rejects_unusable_replies(content):
    with pytest.raises(ProducerError):
        parse_task_list(content)


def test_openai_producer_parses_reply():
    client = _fake_client('{"tasks": [{"title": "Draft", "estimatedDurationDays": 2}, {"title": "Review", "dependsOn": [0]}]}')
    settings = Settings(openai_api_key="sk-test", model="gpt-test")
    producer = OpenAITaskProducer(settings, client=client)

    tasks, source = asyncio.run(produce_tasks("Write a report", 5, producer=producer, settings=settings))

    assert source == "openai"
    assert [t.title for t in tasks] == ["Draft", "Review"]
    call = client.chat.completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["messages"][0]["role"] == "system"
    assert "Write a report" in call["messages"][1]["content"]


def test_openai_producer_garbage_reply_falls_back():
    settings = Settings(openai_api_key="sk-test")
    producer = OpenAITaskProducer(settings, client=_fake_client("I cannot help with that."))
    _, source = asyncio.run(produce_tasks("Write a report", 5, producer=producer, settings=settings))
    assert source == "template:generic"


def test_prompt_mentions_budget_and_due_date():
    from datetime import date

    prompt = render_user_prompt("Run a 10k", 30, date(2026, 5, 1))
    assert "Time Constraint: 30 days" in prompt
    assert "Due Date: 2026-05-01" in prompt
    assert "Due Date" not in render_user_prompt("Run a 10k", 30, None)


def test_openai_producer_closes_its_own_client(monkeypatch):
    created = []

    class FakeAsyncOpenAI:
        def __init__(self, **kwargs):
            self.kwargs = kwargs
            self.closed = False
            self.chat = SimpleNamespace(completions=FakeCompletions('{"tasks": [{"title": "Draft"}]}'))
            created.append(self)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            self.closed = True

    monkeypatch.setattr("goalplan.producer.AsyncOpenAI", FakeAsyncOpenAI)
    settings = Settings(openai_api_key="sk-test", base_url="http://localhost:8080/v1")

    tasks, source = asyncio.run(produce_tasks("Write a report", 5, settings=settings))

    assert source == "openai"
    assert [t.title for t in tasks] == ["Draft"]
    assert len(created) == 1
    assert created[0].closed
    assert created[0].kwargs["base_url"] == "http://localhost:8080/v1"
    assert created[0].kwargs["max_retries"] == 0
