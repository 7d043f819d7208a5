import io
import json
from pathlib import Path

import pytest

from alexdos.runtime import cli
from alexdos.runtime.cli import build_config, create_runner, drive_session, main, parse_args
from alexdos.runtime.state_repository import JsonFileKeyValueStore, MemoryKeyValueStore


def test_parse_args_defaults() -> None:
    args = parse_args([])

    assert args.config is None
    assert args.state_path is None
    assert args.slot is None
    assert args.reset is False
    assert args.memory is False
    assert args.log_level is None


def test_command_line_overrides_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "alexdos.toml"
    config_path.write_text(
        '[storage]\nslot = "from-file"\n[logging]\nlevel = "INFO"\n', encoding="utf-8"
    )
    args = parse_args(
        ["--config", str(config_path), "--slot", "from-cli", "--log-level", "DEBUG"]
    )

    config = build_config(args)

    assert config.state_slot == "from-cli"
    assert config.log_level == "DEBUG"


def test_create_runner_selects_store(tmp_path: Path) -> None:
    memory_runner = create_runner(parse_args(["--memory"]))
    file_runner = create_runner(parse_args(["--state-path", str(tmp_path / "s.json")]))

    assert isinstance(memory_runner.repository.store, MemoryKeyValueStore)
    assert isinstance(file_runner.repository.store, JsonFileKeyValueStore)


def test_default_store_is_a_file_in_the_users_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    runner = create_runner(parse_args([]))
    output_stream = io.StringIO()

    drive_session(runner, input_stream=io.StringIO("mkdir kept\n"), output_stream=output_stream)

    store = runner.repository.store
    assert isinstance(store, JsonFileKeyValueStore)
    assert store.path == tmp_path / ".alexdos" / "state.json"
    assert store.path.is_file()
    restarted = create_runner(parse_args([]))
    assert "kept" in restarted.state.tree.children["home"].children["guest"]


# Why: the transcript must carry the banner, each prompt, and command output in order.
def test_drive_session_runs_until_eof() -> None:
    runner = create_runner(parse_args(["--memory"]))
    input_stream = io.StringIO("mkdir docs\r\ncd docs\npwd\n")
    output_stream = io.StringIO()

    drive_session(runner, input_stream=input_stream, output_stream=output_stream)

    transcript = output_stream.getvalue()
    assert transcript.startswith("ALEXDOS Version 1.1\n")
    assert "C:/home/guest>Created directory: docs\n" in transcript
    assert "C:/home/guest/docs>/home/guest/docs\n" in transcript
    assert transcript.endswith("C:/home/guest/docs>\n")


def test_drive_session_shows_mode_prompts() -> None:
    runner = create_runner(parse_args(["--memory"]))
    output_stream = io.StringIO()

    drive_session(
        runner,
        input_stream=io.StringIO("edit a.txt\nhello\n"),
        output_stream=output_stream,
    )

    assert output_stream.getvalue().endswith("EDITOR> EDITOR> \n")


def test_state_file_survives_between_sessions(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"
    argv = ["--state-path", str(state_path)]

    first = create_runner(parse_args(argv))
    drive_session(
        first,
        input_stream=io.StringIO("user create alice\nuser login alice\n"),
        output_stream=io.StringIO(),
    )

    stored = json.loads(state_path.read_text(encoding="utf-8"))
    assert json.loads(stored["alexdos_state"])["currentUser"] == "alice"

    second = create_runner(parse_args(argv))
    assert second.prompt == "C:/home/alice>"

    wiped = create_runner(parse_args([*argv, "--reset"]))
    assert wiped.state.current_user == "guest"
    assert "alexdos_state" not in json.loads(state_path.read_text(encoding="utf-8"))


def test_main_reports_bad_configuration(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    with pytest.raises(SystemExit, match="config file not found"):
        main(["--config", str(missing)])

    broken = tmp_path / "broken.toml"
    broken.write_text("[logging]\nlevel = 5\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="invalid configuration"):
        main(["--config", str(broken)])


def test_main_drives_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_drive(runner: object) -> None:
        captured["runner"] = runner

    monkeypatch.setattr(cli, "drive_session", fake_drive)
    monkeypatch.setattr(cli.logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    assert main(["--memory", "--log-level", "INFO"]) == 0
    assert captured["level"] == cli.logging.INFO
    assert captured["runner"] is not None
