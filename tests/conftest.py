import logging
import os
import sys

import pytest
import pytest_asyncio
import structlog

from fastedge_deploy.clients import FastEdgeClient
from tests.fakes import API_KEY, API_URL, WASM_BYTES, RecordingReporter


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep host INPUT_* variables and .env files out of settings."""
    for name in list(os.environ):
        if name.startswith("INPUT_") or name in {"GITHUB_OUTPUT", "GITHUB_ACTIONS"}:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    # stdout carries workflow commands and outputs
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)


@pytest.fixture
def wasm_file(tmp_path):
    path = tmp_path / "app.wasm"
    path.write_bytes(WASM_BYTES)
    return path


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest_asyncio.fixture
async def client():
    api = FastEdgeClient(api_key=API_KEY, api_url=API_URL)
    yield api
    await api.close()
