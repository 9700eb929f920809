import pytest

from ts_observer.application_context import ApplicationContext
from ts_observer.config.model import TelegramConfig
from ts_observer.sink.base import NullSink
from ts_observer.sink.telegram import TelegramSink


@pytest.mark.asyncio
async def test_empty_token_uses_null_sink(caplog):
    ctx = await ApplicationContext.create(TelegramConfig(api_key="", target=0))
    assert isinstance(ctx.sink, NullSink)
    assert ctx.session is None
    assert "Token is empty" in caplog.text
    await ctx.shutdown()


@pytest.mark.asyncio
async def test_token_creates_telegram_sink():
    ctx = await ApplicationContext.create(
        TelegramConfig(api_key="123:ABC", target=-1001, api_server="http://localhost:8081/")
    )
    try:
        assert isinstance(ctx.sink, TelegramSink)
        assert ctx.sink.target == -1001
        assert ctx.sink.endpoint == "http://localhost:8081/bot123:ABC/sendMessage"
        assert ctx.session is not None
    finally:
        await ctx.shutdown()
    assert ctx.session is None
    assert ctx.sink is None


@pytest.mark.asyncio
async def test_shutdown_is_idempotent():
    ctx = await ApplicationContext.create(TelegramConfig(api_key="123:ABC", target=1))
    session = ctx.session
    await ctx.shutdown()
    await ctx.shutdown()
    assert session.closed
    assert ctx.session is None
