import json
import os
import time
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from fastapi.testclient import TestClient

# Settings are read when main is imported; give them a key before that happens
os.environ.setdefault("QWEN_API_KEY", "sk-test")

from main import app
from vitalflow.coach import VitalCoach
from vitalflow.config import Settings
from vitalflow.routes.coach_routes import get_coach
from vitalflow.utils.models import BloodPressureReading

DAY_MS = 86_400_000
BASE_TS = 1_700_000_000_000  # 2023-11-14T22:13:20Z


# ----------------------------- Fake LLM client --------------------------------
class FakeLLMClient:
    """Stands in for LLMClient and records every call it receives."""

    def __init__(self):
        self.chat_result: Any = "{}"
        self.image_result: Any = None
        self.chat_calls: List[Dict[str, Any]] = []
        self.image_calls: List[str] = []

    async def complete_chat(self, messages, response_format=None, temperature=None) -> str:
        self.chat_calls.append(
            {"messages": list(messages), "response_format": response_format, "temperature": temperature}
        )
        if isinstance(self.chat_result, Exception):
            raise self.chat_result
        return self.chat_result

    async def generate_image(self, prompt: str) -> Optional[str]:
        self.image_calls.append(prompt)
        if isinstance(self.image_result, Exception):
            raise self.image_result
        return self.image_result


# ----------------------------- Settings / coach ---------------------------------
@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, QWEN_API_KEY="sk-test", TIMEZONE="UTC")


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def coach(fake_llm, settings) -> VitalCoach:
    return VitalCoach(fake_llm, settings)


# ----------------------------- Core client ----------------------------------
@pytest.fixture
def client(coach) -> TestClient:
    """Shared FastAPI TestClient wired to the fake LLM client."""
    app.dependency_overrides[get_coach] = lambda: coach
    yield TestClient(app)
    app.dependency_overrides.clear()


# ----------------------------- Time control ---------------------------------
@pytest.fixture
def fixed_time(monkeypatch) -> int:
    """Freeze time.time() so generatedAt is predictable."""
    now = 1_725_000_000  # arbitrary fixed epoch
    monkeypatch.setattr(time, "time", lambda: now)
    return now


# ----------------------------- Payloads --------------------------------------
@pytest.fixture
def exercise_payload() -> Dict[str, Any]:
    return {
        "name": "坐姿抬腿",
        "description": "坐在椅子上，双腿交替抬起保持 5 秒。",
        "durationSeconds": 60,
        "difficulty": "Easy",
        "funFact": "小腿被称为第二心脏。",
    }


@pytest.fixture
def make_readings() -> Callable[[int], List[BloodPressureReading]]:
    """n readings one day apart; systolic is 110 + index so each line is traceable."""
    def _make(n: int) -> List[BloodPressureReading]:
        return [
            BloodPressureReading(id=f"r{i}", systolic=110 + i, diastolic=70, timestamp=BASE_TS + i * DAY_MS)
            for i in range(n)
        ]
    return _make


# ----------------------------- HTTP response shim ----------------------------
class _Resp:
    def __init__(self, status_code: int, json_obj: Any):
        self.status_code = status_code
        self._json = json_obj
        self.text = json.dumps(json_obj)
    @property
    def ok(self) -> bool: return 200 <= self.status_code < 400
    def json(self) -> Any: return self._json
    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)

@pytest.fixture
def make_response() -> Callable[[int, Any], _Resp]:
    def _make(status: int, body: Any) -> _Resp: return _Resp(status, body)
    return _make
