from datetime import date

import pytest

from goalplan.config import Settings
from goalplan.planner import build_goal

PLAN_START = date(2026, 3, 2)


@pytest.fixture
def offline_settings():
    return Settings(openai_api_key="")


@pytest.fixture
def chain_records():
    """Three tasks in a chain, durations 2, 3 and 4 days."""
    return [
        {"title": "Research", "priority": "High", "category": "Planning", "estimatedDurationDays": 2},
        {"title": "Build", "priority": "High", "estimatedDurationDays": 3, "dependsOn": [0]},
        {"title": "Polish", "priority": "Low", "category": "Testing", "estimatedDurationDays": 4, "dependsOn": [1]},
    ]


@pytest.fixture
def chain_goal(chain_records):
    goal, _ = build_goal("Ship it", chain_records, 20, PLAN_START)
    return goal
