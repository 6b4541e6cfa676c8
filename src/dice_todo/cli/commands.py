# src/dice_todo/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Priority, Task, ValidationError
from ..tasks.task_selector import selection_odds

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

EMPTY_POOL_MESSAGE = "No incomplete tasks to pick from. Add some!"

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /roll, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task(task: Task, position: int | None = None) -> str:
    mark = "x" if task.done else " "
    prefix = f"{position:>3}. " if position is not None else ""
    return f"{prefix}[{mark}] {task.name} ({task.priority.value}) id={task.id[:8]} added {_fmt_ts(task.created_at)}"


def resolve_task(state: AppState, ref: str) -> Task | None:
    """
    Resolve a user reference to a task:
    - 1-based position in the full list (as printed by /list)
    - exact id, or an unambiguous id prefix

    All-digit refs are positions; they only fall back to an exact id match
    (older lists used numeric timestamp ids), never to a prefix match.
    """
    tasks = state.task_store.tasks
    ref = (ref or "").strip()
    if not ref:
        return None

    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1]
        return state.task_store.get(ref)

    exact = state.task_store.get(ref)
    if exact is not None:
        return exact

    matches = [t for t in tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.tasks
    open_n = sum(1 for t in tasks if not t.done)
    backend = getattr(state.settings, "storage_backend", "?")
    path = getattr(state.settings, "storage_path", "?")
    pick = state.roller.result
    return (
        "Status:\n"
        f"  Tasks: {len(tasks)} total, {open_n} open, {len(tasks) - open_n} done\n"
        f"  Storage: {backend} ({path})\n"
        f"  Roll: {state.roller.phase.value}"
        + (f" -> {pick.name}" if pick is not None else "")
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list        -> all tasks
    /list open   -> incomplete tasks only
    /list done   -> completed tasks only
    """
    mode = args[0].lower() if args else "all"
    if mode not in ("all", "open", "done"):
        return "Usage: /list [all|open|done]"

    tasks = state.task_store.tasks
    if not tasks:
        return 'No tasks yet. Add one with "/add <priority> <name>".'

    lines = ["Tasks:"]
    for i, t in enumerate(tasks, start=1):
        if mode == "open" and t.done:
            continue
        if mode == "done" and not t.done:
            continue
        lines.append(format_task(t, i))

    if len(lines) == 1:
        return f"No {mode} tasks."
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name...>             -> Medium priority
    /add <high|medium|low> <name...>
    """
    priority = Priority.MEDIUM
    words = list(args)
    if len(words) > 1:
        try:
            priority = Priority.parse(words[0])
            words = words[1:]
        except ValidationError:
            pass

    try:
        task = state.task_store.add(" ".join(words), priority)
    except ValidationError as e:
        return str(e)
    return f"Added: {task.name} ({task.priority.value})"


def cmd_done(state: AppState, args: list[str]) -> str:
    """/done <ref> -> toggle completion (run again to reopen)"""
    if not args:
        return "Usage: /done <number|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."

    state.task_store.toggle_done(task.id)
    state.roller.forget(task.id)
    return f"{'Reopened' if task.done else 'Completed'}: {task.name}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    """/delete <ref> -> remove a task (asks for confirmation when enabled)"""
    if not args:
        return "Usage: /delete <number|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."

    if getattr(state.settings, "confirm_delete", True):
        if not state.confirm(f"Delete task '{task.name}'? Are you sure?"):
            return "Cancelled."

    state.task_store.delete(task.id)
    state.roller.forget(task.id)
    return f"Deleted: {task.name}"


def cmd_roll(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /roll -> pick the next task (priority-weighted)

    Starts the roll on the running event loop; the console awaits state.roller.wait().
    A previous pick is announced through `emit` before it is replaced.
    """
    previous = state.roller.result
    if previous is not None and emit is not None:
        emit(f"Re-rolling (previous pick: {previous.name}).")

    outcome = state.roller.roll(state.task_store.incomplete())
    if outcome.done() and not outcome.cancelled() and outcome.result() is None:
        return EMPTY_POOL_MESSAGE

    logger.debug("Roll requested (open=%s)", len(state.task_store.incomplete()))
    return "Rolling..."


def cmd_odds(state: AppState, args: list[str]) -> str:
    odds = selection_odds(state.task_store.tasks)
    if not odds:
        return EMPTY_POOL_MESSAGE
    lines = ["Odds for the next roll:"]
    for task, p in sorted(odds, key=lambda x: -x[1]):
        lines.append(f"  {p:6.1%}  {task.name} ({task.priority.value})")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task counts, storage and roll state.")
registry.register("list", cmd_list, help_text="List tasks: /list [all|open|done].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add [high|medium|low] <name>.", aliases=["a"])
registry.register("done", cmd_done, help_text="Toggle completion: /done <number|id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <number|id>.", aliases=["del", "rm"])
registry.register("roll", cmd_roll, help_text="Roll the dice: pick the next task by priority.", aliases=["r"])
registry.register("odds", cmd_odds, help_text="Show each open task's chance of being rolled.")
