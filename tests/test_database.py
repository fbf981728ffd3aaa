"""Tests for the per-request session dependency."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from db import session as session_module


@pytest.fixture
def fake_session(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace the session factory with one handing out a mock session."""
    session = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    monkeypatch.setattr(session_module, "async_session_factory", factory)
    return session


async def test__get_async_session__commits_after_request(fake_session: AsyncMock) -> None:
    gen = session_module.get_async_session()

    assert await anext(gen) is fake_session
    with pytest.raises(StopAsyncIteration):
        await anext(gen)

    fake_session.commit.assert_awaited_once()
    fake_session.rollback.assert_not_awaited()


async def test__get_async_session__rolls_back_on_error(fake_session: AsyncMock) -> None:
    """Test that a failing endpoint leaves nothing committed."""
    gen = session_module.get_async_session()
    await anext(gen)

    with pytest.raises(RuntimeError, match="boom"):
        await gen.athrow(RuntimeError("boom"))

    fake_session.rollback.assert_awaited_once()
    fake_session.commit.assert_not_awaited()
