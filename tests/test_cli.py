from pathlib import Path

import pytest
import serial
import typer
from conftest import MockConsole
from rich.console import Console
from typer.testing import CliRunner

import serial_cmdline.cli as cli_module
import serial_cmdline.console.console as console_module
import serial_cmdline.console.rendering as rendering
from serial_cmdline.cli import (
    create_app,
    default_command_line_factory,
    default_console_factory,
    open_stream,
)
from serial_cmdline.command_line import CommandLine
from serial_cmdline.console.console import HeadlessConsole, PollingConsole, ReplConsole
from serial_cmdline.console.terminal import TerminalStream
from serial_cmdline.runtime_config import ModeChoice, RuntimeConfig
from serial_cmdline.stream import BufferStream


@pytest.fixture(autouse=True)
def isolate_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SERIAL_CMDLINE_PORT", raising=False)
    monkeypatch.delenv("SERIAL_CMDLINE_BAUDRATE", raising=False)


@pytest.fixture
def configs() -> list[RuntimeConfig]:
    return []


@pytest.fixture
def consoles() -> list[MockConsole]:
    return []


@pytest.fixture
def app_with_mocks(
    configs: list[RuntimeConfig], consoles: list[MockConsole]
) -> typer.Typer:
    def test_command_line_factory(config: RuntimeConfig) -> CommandLine:
        configs.append(config)
        return CommandLine(BufferStream(), echo=False)

    def test_console_factory(command_line: CommandLine, config: RuntimeConfig) -> MockConsole:
        console = MockConsole(command_line, config)
        consoles.append(console)
        return console

    return create_app(test_command_line_factory, test_console_factory)


def test_cli_invokes_console_with_explicit_flags(
    app_with_mocks: typer.Typer, configs: list[RuntimeConfig], consoles: list[MockConsole]
) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app_with_mocks,
        ["--port", "/dev/ttyUSB0", "--baudrate", "115200", "--no-echo"],
    )
    assert result.exit_code == 0, result.output
    assert len(configs) == 1
    cfg = configs[0]
    assert cfg.mode == ModeChoice.serial
    assert cfg.port == "/dev/ttyUSB0"
    assert cfg.baudrate == 115200
    assert cfg.echo is False
    assert consoles[0].run_called


def test_cli_uses_environment_defaults(
    app_with_mocks: typer.Typer, configs: list[RuntimeConfig], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SERIAL_CMDLINE_PORT", "/dev/ttyACM0")
    monkeypatch.setenv("SERIAL_CMDLINE_BAUDRATE", "57600")
    result = CliRunner().invoke(app_with_mocks, [])
    assert result.exit_code == 0, result.output
    assert configs[0].port == "/dev/ttyACM0"
    assert configs[0].baudrate == 57600
    assert configs[0].echo is True


def test_cli_requires_port_in_serial_mode(
    app_with_mocks: typer.Typer, configs: list[RuntimeConfig]
) -> None:
    result = CliRunner().invoke(app_with_mocks, [])
    assert result.exit_code == 1
    assert "serial port is required" in result.output
    assert configs == []


def test_cli_repl_mode_needs_no_port(
    app_with_mocks: typer.Typer, configs: list[RuntimeConfig]
) -> None:
    result = CliRunner().invoke(app_with_mocks, ["--mode", "repl"])
    assert result.exit_code == 0, result.output
    assert configs[0].mode == ModeChoice.repl


def test_cli_reports_serial_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_factory(config: RuntimeConfig) -> CommandLine:
        raise serial.SerialException("no such device")

    app = create_app(failing_factory, MockConsole)
    result = CliRunner().invoke(app, ["--port", "/dev/missing"])
    assert result.exit_code == 1
    assert "could not open /dev/missing" in result.output


def test_cli_keyboard_interrupt_exits_cleanly() -> None:
    class InterruptingConsole(MockConsole):
        async def run(self) -> None:
            raise KeyboardInterrupt

    app = create_app(lambda cfg: CommandLine(BufferStream()), InterruptingConsole)
    result = CliRunner().invoke(app, ["--port", "/dev/ttyUSB0"])
    assert result.exit_code == 0
    assert "Exiting..." in result.output


def test_cli_reports_lost_connection() -> None:
    class UnpluggedConsole(MockConsole):
        async def run(self) -> None:
            raise serial.SerialException("device disconnected")

    app = create_app(lambda cfg: CommandLine(BufferStream()), UnpluggedConsole)
    result = CliRunner().invoke(app, ["--port", "/dev/ttyUSB0"])
    assert result.exit_code == 1
    assert "lost connection to /dev/ttyUSB0" in result.output


def test_cli_headless_command_end_to_end(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = Console(record=True, width=80)
    monkeypatch.setattr(rendering, "console", recorder)
    app = create_app()
    result = CliRunner().invoke(app, ["--command", "echo 42"])
    assert result.exit_code == 0, result.output
    assert "The echo command received 42." in recorder.export_text()


def test_ports_subcommand(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "list_serial_ports", lambda: ["/dev/ttyUSB0"])
    result = CliRunner().invoke(create_app(), ["ports"])
    assert result.exit_code == 0
    assert "/dev/ttyUSB0" in result.output


def test_ports_subcommand_none_found(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "list_serial_ports", lambda: [])
    result = CliRunner().invoke(create_app(), ["ports"])
    assert "No serial ports found." in result.output


def test_open_stream_per_mode() -> None:
    assert isinstance(open_stream(RuntimeConfig(mode=ModeChoice.repl)), BufferStream)
    assert isinstance(open_stream(RuntimeConfig(command="help")), BufferStream)
    assert isinstance(open_stream(RuntimeConfig(mode=ModeChoice.terminal)), TerminalStream)
    with pytest.raises(ValueError):
        open_stream(RuntimeConfig(mode=ModeChoice.serial))


def test_default_command_line_factory_registers_demo_commands() -> None:
    command_line = default_command_line_factory(RuntimeConfig(mode=ModeChoice.repl))
    assert command_line.get_command_names() == ["help", "h", "maxcmds", "echo"]
    # In-memory streams are never echoed
    assert command_line.echo is False


def test_default_command_line_factory_warns_on_full_table() -> None:
    command_line = default_command_line_factory(
        RuntimeConfig(mode=ModeChoice.repl, max_handlers=1)
    )
    stream = command_line.stream
    assert isinstance(stream, BufferStream)
    assert b"Too many commands" in stream.getvalue()


@pytest.mark.parametrize(
    "config,expected",
    [
        (RuntimeConfig(command="help"), HeadlessConsole),
        (RuntimeConfig(mode=ModeChoice.repl), ReplConsole),
        (RuntimeConfig(mode=ModeChoice.serial, port="/dev/ttyUSB0"), PollingConsole),
        (RuntimeConfig(mode=ModeChoice.terminal), PollingConsole),
    ],
)
def test_default_console_factory(config: RuntimeConfig, expected: type) -> None:
    command_line = CommandLine(BufferStream())
    assert isinstance(default_console_factory(command_line, config), expected)


def test_console_module_exports() -> None:
    assert set(console_module.__all__) == {
        "ConsoleInterface",
        "HeadlessConsole",
        "PollingConsole",
        "ReplConsole",
    }
