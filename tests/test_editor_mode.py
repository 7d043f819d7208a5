from typing import Callable

from alexdos.path_resolver import resolve_directory
from alexdos.runtime.editor_mode import EDITOR_PROMPT
from alexdos.runtime.session_runner import SessionRunner
from alexdos.vfs import DirectoryNode, FileNode, read_file


def _send(runner: SessionRunner, *lines: str) -> str:
    for line in lines:
        runner.send_command(line)
    return runner.read_output()


def test_editor_saves_buffer_and_pops(runner: SessionRunner) -> None:
    output = _send(runner, "edit notes.txt")
    assert "Creating new file 'notes.txt'" in output
    assert runner.prompt == EDITOR_PROMPT

    output = _send(runner, "hello", "world", "SAVE")

    assert output == "File 'notes.txt' saved.\n"
    assert not runner.modes.active
    home = resolve_directory(runner.state, "/home/guest")
    assert read_file(home, "notes.txt") == "hello\nworld\n"


def test_editor_lines_bypass_command_dispatch(runner: SessionRunner) -> None:
    _send(runner, "edit cmds.txt", "ls", "rm cmds.txt", "save")

    home = resolve_directory(runner.state, "/home/guest")
    assert read_file(home, "cmds.txt") == "ls\nrm cmds.txt\n"


def test_editor_exit_discards_changes(runner: SessionRunner) -> None:
    home = resolve_directory(runner.state, "/home/guest")
    home.children["keep.txt"] = FileNode("original\n")

    output = _send(runner, "edit keep.txt", "scribble", "exit")

    assert "Loading 'keep.txt'" in output
    assert "Changes to 'keep.txt' discarded." in output
    assert read_file(home, "keep.txt") == "original\n"


def test_editor_appends_to_existing_contents(runner: SessionRunner) -> None:
    home = resolve_directory(runner.state, "/home/guest")
    home.children["log.txt"] = FileNode("one\n")

    _send(runner, "edit log.txt", "two", "SAVE")

    assert read_file(home, "log.txt") == "one\ntwo\n"


def test_editor_refuses_directories(runner: SessionRunner) -> None:
    resolve_directory(runner.state, "/home/guest").children["docs"] = DirectoryNode()

    output = _send(runner, "edit docs")

    assert output == "Error: 'docs' is a directory\n"
    assert not runner.modes.active


def test_saved_file_survives_reload(
    runner: SessionRunner, make_runner: Callable[..., SessionRunner]
) -> None:
    _send(runner, "edit persisted.txt", "data", "SAVE")

    reloaded = make_runner()

    home = resolve_directory(reloaded.state, "/home/guest")
    assert read_file(home, "persisted.txt") == "data\n"
