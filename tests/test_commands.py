import random

import pytest

from alexdos.path_resolver import resolve_directory
from alexdos.runtime.commands import (
    BUILTIN_COMMANDS,
    Command,
    CommandRegistry,
    build_default_registry,
)
from alexdos.runtime.session_runner import SessionRunner
from alexdos.vfs import DirectoryNode, FileNode


def _run(runner: SessionRunner, line: str) -> list[str]:
    runner.send_command(line)
    return runner.read_output().splitlines()


@pytest.fixture()
def populated(runner: SessionRunner) -> SessionRunner:
    home = resolve_directory(runner.state, "/home/guest")
    home.children["docs"] = DirectoryNode()
    home.children["notes.txt"] = FileNode("line one\nline two\n")
    home.children[".secret"] = FileNode("")
    return runner


def test_registry_is_explicit_and_case_insensitive() -> None:
    registry = build_default_registry()

    assert len(registry) == len(BUILTIN_COMMANDS)
    assert registry.get("LS") is registry.get("ls")
    assert registry.get("format") is None
    with pytest.raises(ValueError):
        registry.register(Command("ls", "ls", "again", lambda runner, args: None))


def test_custom_registry_limits_commands(make_runner) -> None:
    seen: list[list[str]] = []
    registry = CommandRegistry(
        [Command("ping", "ping", "reply", lambda runner, args: seen.append(list(args)))]
    )
    runner = make_runner(registry=registry)

    runner.send_command("ping a b")
    runner.send_command("ls")

    assert seen == [["a", "b"]]
    assert runner.read_output() == "Error: Command not found: ls\n"


def test_ls_lists_visible_entries(populated: SessionRunner) -> None:
    assert _run(populated, "ls") == ["docs/", "notes.txt"]
    assert _run(populated, "ls -a") == [".secret", "docs/", "notes.txt"]


def test_cat_prints_file(populated: SessionRunner) -> None:
    assert _run(populated, "cat notes.txt") == ["line one", "line two"]
    assert _run(populated, "cat docs") == ["Error: File not found: docs"]
    assert _run(populated, "cat") == ["Error: Usage: cat <name>"]


def test_cd_and_pwd(populated: SessionRunner) -> None:
    _run(populated, "cd docs")
    assert _run(populated, "pwd") == ["/home/guest/docs"]
    assert populated.prompt == "C:/home/guest/docs>"

    for _ in range(5):
        _run(populated, "cd ..")
    assert populated.state.current_dir == "/"

    assert _run(populated, "cd nowhere") == ["Error: Directory not found: /nowhere"]
    assert populated.state.current_dir == "/"


def test_mkdir_creates_directory(populated: SessionRunner) -> None:
    assert _run(populated, "mkdir src") == ["Created directory: src"]
    assert isinstance(resolve_directory(populated.state, "/home/guest/src"), DirectoryNode)
    assert _run(populated, "mkdir notes.txt") == ["Error: 'notes.txt' already exists"]


def test_mv_renames_within_directory(populated: SessionRunner) -> None:
    assert _run(populated, "mv notes.txt todo.txt") == ["Moved notes.txt to todo.txt"]
    assert _run(populated, "ls") == ["docs/", "todo.txt"]


def test_mv_refuses_to_overwrite(populated: SessionRunner) -> None:
    lines = _run(populated, "mv notes.txt docs")

    assert lines == ["Error: Destination already exists: docs"]
    home = resolve_directory(populated.state, "/home/guest")
    assert isinstance(home.get("notes.txt"), FileNode)
    assert isinstance(home.get("docs"), DirectoryNode)


def test_rm_removes_files_only(populated: SessionRunner) -> None:
    assert _run(populated, "rm docs") == ["Error: File not found: docs"]
    assert _run(populated, "rm notes.txt") == ["Removed file: notes.txt"]
    assert _run(populated, "ls") == ["docs/"]


def test_user_commands(runner: SessionRunner) -> None:
    assert _run(runner, "user create alice") == ["User 'alice' created."]
    assert _run(runner, "user create alice") == ["Error: User 'alice' already exists."]
    assert _run(runner, "user list") == ["Available users:", "- alice", "- guest"]
    assert _run(runner, "user login bob") == ["Error: User 'bob' does not exist."]
    assert _run(runner, "user login alice") == ["Logged in as 'alice'."]
    assert runner.state.current_dir == "/home/alice"
    assert _run(runner, "user") == ["Error: Usage: user <create|login|list> [name]"]


def test_calc_uses_safe_evaluator(runner: SessionRunner) -> None:
    assert _run(runner, "calc 2 + 3 * (4 - 1)") == ["11"]
    assert _run(runner, "calc 7/2") == ["3.5"]
    lines = _run(runner, "calc __import__('os')")
    assert lines[0].startswith("Error: Invalid expression:")


def test_echo_joins_arguments(runner: SessionRunner) -> None:
    assert _run(runner, "echo hello   world") == ["hello world"]


def test_rps_uses_session_rng(make_runner) -> None:
    runner = make_runner(rng=random.Random(7))
    expected = random.Random(7).choice(("rock", "paper", "scissors"))

    lines = _run(runner, "rps ROCK")

    assert lines[:2] == ["You chose: rock", f"Computer chose: {expected}"]
    outcome = {"rock": "It's a tie!", "scissors": "You win!", "paper": "You lose!"}
    assert lines[2] == outcome[expected]
    assert _run(runner, "rps lizard")[0].startswith("Error: Invalid choice.")


def test_help_lists_every_command(runner: SessionRunner) -> None:
    lines = _run(runner, "help")

    assert lines[0] == "ALEXDOS Help Menu"
    body = "\n".join(lines)
    for command in BUILTIN_COMMANDS:
        assert command.usage in body


def test_info_and_sysinfo(runner: SessionRunner) -> None:
    assert _run(runner, "info") == [
        "ALEXDOS Version 1.1 (Console)",
        "State slot: alexdos_state",
        "User: guest",
    ]
    lines = _run(runner, "sysinfo")
    assert lines[0] == "-- System Information --"
    assert "  Date: 2024-05-17 09:30:05" in lines


def test_cls_clears_pending_output(runner: SessionRunner) -> None:
    runner.send_command("echo soon gone")
    runner.send_command("cls")

    assert runner.read_output() == ""
    assert runner.console.clear_requests == 1


def test_missing_arguments_report_usage(runner: SessionRunner) -> None:
    for line, usage in [
        ("cd", "cd <path>"),
        ("mkdir", "mkdir <name>"),
        ("mv a", "mv <source> <destination>"),
        ("rm", "rm <name>"),
        ("edit", "edit <name>"),
        ("calc", "calc <expression>"),
    ]:
        assert _run(runner, line) == [f"Error: Usage: {usage}"]


def test_mv_refuses_home_directories(runner: SessionRunner, make_runner) -> None:
    for line in ("edit keep.txt", "precious", "SAVE", "cd /home"):
        runner.send_command(line)
    runner.read_output()

    assert _run(runner, "mv guest g2") == [
        "Error: Cannot move '/home/guest': it holds a user's home directory."
    ]
    _run(runner, "cd /")
    assert _run(runner, "mv home house") == [
        "Error: Cannot move '/home': it holds a user's home directory."
    ]

    assert _run(runner, "user create bob") == ["User 'bob' created."]
    reloaded = make_runner()
    home = resolve_directory(reloaded.state, "/home/guest")
    assert home.get("keep.txt") == FileNode("precious\n")
