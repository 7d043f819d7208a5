"""Built-in shell commands and the ordered registry that exposes them."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Sequence

from ..errors import InvalidInputError
from ..path_resolver import canonical_path, change_directory, current_directory, split_path
from ..profiles import create_user, ensure_movable, list_users, login
from ..vfs import (
    DirectoryNode,
    NodeKind,
    create_child,
    list_children,
    read_file,
    remove_child,
    rename_or_move,
)
from .calculator import evaluate, format_result
from .chat_mode import open_chat
from .editor_mode import open_editor
from .quiz_mode import open_quiz

if TYPE_CHECKING:
    from .session_runner import SessionRunner

SYSTEM_NAME = "ALEXDOS"
SYSTEM_VERSION = "1.1"
RPS_CHOICES = ("rock", "paper", "scissors")
_RPS_BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}

CommandHandler = Callable[["SessionRunner", Sequence[str]], None]


@dataclass(frozen=True)
class Command:
    """One registry entry: the name typed, its usage line, and its handler."""

    name: str
    usage: str
    description: str
    handler: CommandHandler


class CommandRegistry:
    """Ordered, explicitly populated table of commands."""

    def __init__(self, commands: Sequence[Command] = ()) -> None:
        self._commands: Dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        key = command.name.lower()
        if key in self._commands:
            raise ValueError(f"command {command.name!r} registered twice")
        self._commands[key] = command

    def get(self, name: str) -> Command | None:
        return self._commands.get(name.lower())

    def names(self) -> List[str]:
        return list(self._commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


def _require_args(args: Sequence[str], count: int, usage: str) -> None:
    if len(args) < count:
        raise InvalidInputError(f"Usage: {usage}")


def _cmd_ls(runner: "SessionRunner", args: Sequence[str]) -> None:
    show_hidden = "-a" in args
    directory = current_directory(runner.state)
    for name, kind in list_children(directory, include_hidden=show_hidden):
        runner.console.echo(f"{name}/" if kind is NodeKind.DIRECTORY else name)


def _cmd_cd(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "cd <path>")
    change_directory(runner.state, args[0])
    runner.save()


def _cmd_pwd(runner: "SessionRunner", args: Sequence[str]) -> None:
    runner.console.echo(runner.state.current_dir)


def _cmd_cat(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "cat <name>")
    contents = read_file(current_directory(runner.state), args[0])
    runner.console.echo(contents.removesuffix("\n"))


def _cmd_mkdir(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "mkdir <name>")
    create_child(current_directory(runner.state), args[0], DirectoryNode())
    runner.save()
    runner.console.echo(f"Created directory: {args[0]}")


def _cmd_mv(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 2, "mv <source> <destination>")
    old_name, new_name = args[0], args[1]
    source = canonical_path([*split_path(runner.state.current_dir), old_name])
    ensure_movable(runner.state, source)
    rename_or_move(current_directory(runner.state), old_name, new_name)
    runner.save()
    runner.console.echo(f"Moved {old_name} to {new_name}")


def _cmd_rm(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "rm <name>")
    remove_child(current_directory(runner.state), args[0])
    runner.save()
    runner.console.echo(f"Removed file: {args[0]}")


def _cmd_edit(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "edit <name>")
    open_editor(runner, args[0])


def _cmd_chat(runner: "SessionRunner", args: Sequence[str]) -> None:
    open_chat(runner)


def _cmd_quiz(runner: "SessionRunner", args: Sequence[str]) -> None:
    open_quiz(runner)


def _cmd_user(runner: "SessionRunner", args: Sequence[str]) -> None:
    usage = "Usage: user <create|login|list> [name]"
    action = args[0].lower() if args else ""
    state = runner.state
    console = runner.console
    if action == "create" and len(args) > 1:
        create_user(state, args[1])
        runner.save()
        console.echo(f"User '{args[1]}' created.")
    elif action == "login" and len(args) > 1:
        login(state, args[1])
        runner.save()
        console.echo(f"Logged in as '{args[1]}'.")
    elif action == "list":
        console.echo("Available users:")
        for name in list_users(state):
            console.echo(f"- {name}")
    else:
        raise InvalidInputError(usage)


def _cmd_calc(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "calc <expression>")
    try:
        value = evaluate(" ".join(args))
    except InvalidInputError as exc:
        raise InvalidInputError(f"Invalid expression: {exc}") from exc
    runner.console.echo(format_result(value))


def _cmd_echo(runner: "SessionRunner", args: Sequence[str]) -> None:
    runner.console.echo(" ".join(args))


def _cmd_rps(runner: "SessionRunner", args: Sequence[str]) -> None:
    _require_args(args, 1, "rps <rock|paper|scissors>")
    choice = args[0].lower()
    if choice not in RPS_CHOICES:
        raise InvalidInputError("Invalid choice. Please choose rock, paper, or scissors.")
    computer = runner.rng.choice(RPS_CHOICES)
    console = runner.console
    console.echo(f"You chose: {choice}")
    console.echo(f"Computer chose: {computer}")
    if choice == computer:
        console.echo("It's a tie!")
    elif _RPS_BEATS[choice] == computer:
        console.echo("You win!")
    else:
        console.echo("You lose!")


def _cmd_help(runner: "SessionRunner", args: Sequence[str]) -> None:
    console = runner.console
    console.echo(f"{SYSTEM_NAME} Help Menu")
    console.echo("Commands:")
    width = max((len(command.usage) for command in runner.registry), default=0)
    for command in runner.registry:
        console.echo(f"  {command.usage.ljust(width)}  {command.description}")


def _cmd_info(runner: "SessionRunner", args: Sequence[str]) -> None:
    console = runner.console
    console.echo(f"{SYSTEM_NAME} Version {SYSTEM_VERSION} (Console)")
    console.echo(f"State slot: {runner.repository.slot}")
    console.echo(f"User: {runner.state.current_user}")


def _cmd_sysinfo(runner: "SessionRunner", args: Sequence[str]) -> None:
    console = runner.console
    console.echo("-- System Information --")
    console.echo(f"  {SYSTEM_NAME} Kernel: {SYSTEM_VERSION}")
    console.echo(f"  Python: {platform.python_version()} ({sys.implementation.name})")
    console.echo(f"  Platform: {platform.system()} {platform.release()}")
    console.echo(f"  Date: {runner.clock().strftime('%Y-%m-%d %H:%M:%S')}")
    console.echo(f"  CPU Cores: {os.cpu_count() or 'N/A'}")
    console.echo("------------------------")


def _cmd_cls(runner: "SessionRunner", args: Sequence[str]) -> None:
    runner.console.clear()


def _cmd_reboot(runner: "SessionRunner", args: Sequence[str]) -> None:
    runner.reboot()


def _cmd_reset(runner: "SessionRunner", args: Sequence[str]) -> None:
    runner.reset()
    runner.console.echo("Stored state discarded; defaults restored.")


BUILTIN_COMMANDS: tuple[Command, ...] = (
    Command("help", "help", "show this list", _cmd_help),
    Command("ls", "ls [-a]", "list the current directory", _cmd_ls),
    Command("cd", "cd <path>", "change directory", _cmd_cd),
    Command("pwd", "pwd", "print the current directory", _cmd_pwd),
    Command("cat", "cat <name>", "print a file", _cmd_cat),
    Command("mkdir", "mkdir <name>", "create a directory", _cmd_mkdir),
    Command("mv", "mv <old> <new>", "rename a file or directory", _cmd_mv),
    Command("rm", "rm <name>", "remove a file", _cmd_rm),
    Command("edit", "edit <name>", "edit or create a file", _cmd_edit),
    Command("chat", "chat", "open the chat log", _cmd_chat),
    Command("quiz", "quiz", "take the quiz", _cmd_quiz),
    Command("user", "user <create|login|list> [name]", "manage user profiles", _cmd_user),
    Command("calc", "calc <expression>", "evaluate arithmetic", _cmd_calc),
    Command("echo", "echo <text>", "print text", _cmd_echo),
    Command("rps", "rps <rock|paper|scissors>", "play rock paper scissors", _cmd_rps),
    Command("info", "info", "show version and user", _cmd_info),
    Command("sysinfo", "sysinfo", "show host details", _cmd_sysinfo),
    Command("cls", "cls", "clear the screen", _cmd_cls),
    Command("reboot", "reboot", "reload state from storage", _cmd_reboot),
    Command("reset", "reset", "discard stored state", _cmd_reset),
)


def build_default_registry() -> CommandRegistry:
    return CommandRegistry(BUILTIN_COMMANDS)


__all__ = [
    "BUILTIN_COMMANDS",
    "Command",
    "CommandHandler",
    "CommandRegistry",
    "RPS_CHOICES",
    "SYSTEM_NAME",
    "SYSTEM_VERSION",
    "build_default_registry",
]
