from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from imagecomment.config import Settings, override_settings
from imagecomment.main import app


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly selected."""
    markexpr = config.getoption("-m", default="")
    if "integration" in markexpr:
        return

    skip_integration = pytest.mark.skip(reason="use -m integration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _test_settings(tmp_path):
    """Override settings so tests never read the user's config."""
    override_settings(
        Settings(
            state_dir=str(tmp_path / "state"),
        )
    )
    yield
    override_settings(None)


@pytest.fixture(autouse=True)
def temp_dir(tmp_path, monkeypatch):
    """Isolated stand-in for the system temp directory."""
    path = tmp_path / "systemp"
    path.mkdir()
    monkeypatch.setattr(
        "imagecomment.clipboard.guard.tempfile.gettempdir",
        lambda: str(path),
    )
    return path


@pytest.fixture()
def workspace(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[httpx.AsyncClient]:
    """Async test client.

    Test modules should set app.state.orchestrator before using
    this client.
    """
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
