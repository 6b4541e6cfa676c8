# src/dice_todo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import format_task, registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import Task, ValidationError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _rewrite_line(line: str) -> None:
    """
    Overwrite the current terminal line with `line`.
    Best-effort: if not a TTY, do nothing (preview ticks are visual noise in logs/pipes).
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\r\033[2K" + line)
            sys.stdout.flush()
    except Exception:
        logger.debug("Preview rewrite failed.", exc_info=True)


class ConsoleRollView:
    """RollListener that renders preview ticks on one line and prints the final pick."""

    def on_preview(self, task: Task) -> None:
        _rewrite_line(f"Rolling... {task.name}")

    def on_settled(self, task: Task | None) -> None:
        _rewrite_line("")
        if task is None:
            return
        _print_ts(f"Selected task: {task.name} ({task.priority.value})")


async def _read_line(prompt: str) -> str:
    """
    Read one line without blocking the event loop.

    The reader is a daemon thread, so a pending input() never keeps the process alive
    after the loop is gone (Ctrl+C, SIGTERM).
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _deliver(value: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(value or "")

    def _reader() -> None:
        try:
            line, exc = input(prompt), None
        except (EOFError, KeyboardInterrupt) as e:
            line, exc = None, e
        # The loop may already be closed if the app exited while we were blocked.
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_deliver, line, exc)

    threading.Thread(target=_reader, name="console-input", daemon=True).start()
    return await fut


def _ask_yes_no(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL.

    Lines starting with "/" are commands; any other line is added as a Medium task.
    input() runs in a daemon thread so the event loop keeps driving roll timers.
    """
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "dice-todo"))

    state.roller.listener = ConsoleRollView()
    state.confirm = _ask_yes_no

    _print_ts(f"[{app_name}] Let chance choose, with priority. Use /help for commands, /exit to quit.")
    tasks = state.task_store.tasks
    if tasks:
        print("\n".join(format_task(t, i) for i, t in enumerate(tasks, start=1)))

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = (await _read_line(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
            if cmd_response is None:
                task = state.task_store.add(user_input)
                cmd_response = f"Added: {task.name} ({task.priority.value})"
        except ValidationError as e:
            cmd_response = str(e)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        _print_ts(cmd_response)

        if state.roller.rolling:
            try:
                await state.roller.wait()
            except Exception:
                logger.exception("Roll failed.")
                _print_ts("Internal error while rolling.")

    state.roller.listener = None
    logger.info("Console connector finished.")
