from unittest.mock import AsyncMock, Mock, patch

import pytest

from ts_observer import main as main_module
from ts_observer.errors.internal import ConfigError, ConnectError, QueryError, StreamIOError
from ts_observer.main import init_connection, main, parse_args, run


def make_config():
    config = Mock()
    config.raw_query.server = "127.0.0.1"
    config.raw_query.port = 10011
    config.raw_query.user = "serveradmin"
    config.raw_query.password = "secret"
    config.server.server_id = 1
    config.server.ignore_user = ["Bot"]
    config.misc.interval = 20
    return config


def make_context():
    context = Mock()
    context.sink = Mock()
    context.shutdown = AsyncMock()
    return context


def make_query_session():
    session = Mock()
    session.login = AsyncMock()
    session.select_server = AsyncMock()
    session.close = AsyncMock()
    return session


class TestInitConnection:
    """Bootstrap sequence."""

    @pytest.mark.asyncio
    async def test_connect_login_select(self):
        session = make_query_session()
        with patch.object(main_module.QuerySession, "connect", AsyncMock(return_value=session)) as connect:
            result = await init_connection(make_config())
        assert result is session
        connect.assert_awaited_once_with("127.0.0.1", 10011)
        session.login.assert_awaited_once_with("serveradmin", "secret")
        session.select_server.assert_awaited_once_with(1)
        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_login_failure_closes_session(self, caplog):
        session = make_query_session()
        session.login.side_effect = QueryError(520, "invalid loginname or password")
        with patch.object(main_module.QuerySession, "connect", AsyncMock(return_value=session)):
            with pytest.raises(QueryError):
                await init_connection(make_config())
        session.close.assert_awaited_once()
        session.select_server.assert_not_awaited()
        assert "Login failed" in caplog.text

    @pytest.mark.asyncio
    async def test_select_failure_logged(self, caplog):
        session = make_query_session()
        session.select_server.side_effect = QueryError(1024, "invalid serverID")
        with patch.object(main_module.QuerySession, "connect", AsyncMock(return_value=session)):
            with pytest.raises(QueryError):
                await init_connection(make_config())
        assert "Select server id failed" in caplog.text


class TestMain:
    """Async entry point exit codes."""

    @pytest.mark.asyncio
    async def test_clean_run_returns_zero(self):
        session = make_query_session()
        context = make_context()
        pipeline = Mock()
        pipeline.run = AsyncMock()
        with (
            patch.object(main_module, "load_config", return_value=make_config()),
            patch.object(main_module, "init_connection", AsyncMock(return_value=session)),
            patch.object(main_module.ApplicationContext, "create", AsyncMock(return_value=context)),
            patch.object(main_module, "RelayPipeline", return_value=pipeline) as pipeline_cls,
        ):
            assert await main("config.toml") == 0
        pipeline_cls.assert_called_once_with(
            session, context.sink, ignore_list=["Bot"], poll_interval_ms=20
        )
        session.close.assert_awaited_once()
        context.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_config_error_returns_one(self):
        with patch.object(main_module, "load_config", side_effect=ConfigError("bad")):
            assert await main("config.toml") == 1

    @pytest.mark.asyncio
    async def test_startup_failure_returns_one(self):
        with (
            patch.object(main_module, "load_config", return_value=make_config()),
            patch.object(main_module, "init_connection", AsyncMock(side_effect=ConnectError("refused"))),
        ):
            assert await main("config.toml") == 1

    @pytest.mark.asyncio
    async def test_observer_failure_returns_one_and_cleans_up(self):
        session = make_query_session()
        context = make_context()
        pipeline = Mock()
        pipeline.run = AsyncMock(side_effect=StreamIOError("Connection closed by server"))
        with (
            patch.object(main_module, "load_config", return_value=make_config()),
            patch.object(main_module, "init_connection", AsyncMock(return_value=session)),
            patch.object(main_module.ApplicationContext, "create", AsyncMock(return_value=context)),
            patch.object(main_module, "RelayPipeline", return_value=pipeline),
        ):
            assert await main("config.toml") == 1
        session.close.assert_awaited_once()
        context.shutdown.assert_awaited_once()


class TestRun:
    """Synchronous entry point and argument handling."""

    def test_parse_args_default(self):
        assert parse_args([]) == "config.toml"

    def test_parse_args_custom_path(self):
        assert parse_args(["/etc/observer.toml"]) == "/etc/observer.toml"

    @pytest.mark.parametrize("argv", [["a.toml", "b.toml"], ["--help"]])
    def test_parse_args_usage_error(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(argv)
        assert exc_info.value.code == 2
        assert "usage" in capsys.readouterr().err

    @pytest.mark.parametrize("code", [0, 1])
    def test_run_exits_with_main_code(self, code):
        with (
            patch.object(main_module, "LoggerConfigurator"),
            patch.object(main_module, "main", Mock(return_value=None)),
            patch.object(main_module.asyncio, "run", return_value=code),
        ):
            with pytest.raises(SystemExit) as exc_info:
                run(["config.toml"])
        assert exc_info.value.code == code

    def test_run_keyboard_interrupt(self):
        with (
            patch.object(main_module, "LoggerConfigurator"),
            patch.object(main_module, "main", Mock(return_value=None)),
            patch.object(main_module.asyncio, "run", side_effect=KeyboardInterrupt),
        ):
            with pytest.raises(SystemExit) as exc_info:
                run([])
        assert exc_info.value.code == 0

    def test_run_unexpected_error(self):
        with (
            patch.object(main_module, "LoggerConfigurator"),
            patch.object(main_module, "main", Mock(return_value=None)),
            patch.object(main_module.asyncio, "run", side_effect=RuntimeError("boom")),
        ):
            with pytest.raises(SystemExit) as exc_info:
                run([])
        assert exc_info.value.code == 1
