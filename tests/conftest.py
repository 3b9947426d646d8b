from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from fakes import FakeGateway  # noqa: E402


@pytest.fixture
def backend_module(monkeypatch):
    # An empty key wins over anything a local .env would load.
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("HISTORY_MAX_SESSIONS", "100")
    monkeypatch.setenv("HISTORY_MAX_ENTRIES", "50")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def install_gateway(backend_module, monkeypatch) -> Callable[..., FakeGateway]:
    def _install(*replies, configured: bool = True) -> FakeGateway:
        gateway = FakeGateway(replies, configured=configured)
        monkeypatch.setattr(backend_module.assistant, "gateway", gateway)
        return gateway

    return _install
