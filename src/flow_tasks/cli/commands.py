# src/flow_tasks/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..errors import NotFound, ValidationError
from ..tasks import prompt
from ..tasks.dates import parse_date_input
from ..tasks.importer import import_yaml
from ..tasks.task_models import Tag, TaskStatus
from ..tasks.tree import build_tree
from .render import render_detail, render_tree, tag_badges

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "todo": TaskStatus.NOT_STARTED,
    "open": TaskStatus.NOT_STARTED,
    "doing": TaskStatus.IN_PROGRESS,
    "wip": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.COMPLETED,
}

_CLEAR_WORDS = {"-", "clear", "none"}


class CommandRegistry:
    """Slash-command registry used by the console (/help, /add, ...)."""

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
        except (TypeError, ValueError):
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
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _parse_id(raw: str, what: str = "task id") -> int:
    try:
        return int(raw.lstrip("#"))
    except ValueError as e:
        raise ValidationError(f"expected a {what}, got {raw!r}") from e


def _require_args(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise ValidationError(f"Usage: {usage}")


def _tree(state: AppState, *, show_descriptions: bool = False) -> str:
    return render_tree(
        build_tree(state.store.list()),
        color=state.color,
        show_descriptions=show_descriptions,
    )


def _with_tree(state: AppState, message: str) -> str:
    return f"{message}\n\n{_tree(state)}"


def _find_tag(state: AppState, name: str) -> Tag | None:
    for tag in state.store.list_tags():
        if tag.name == name:
            return tag
    return None


# ---- task commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list      -> task tree
    /list -d   -> task tree with descriptions
    """
    return _tree(state, show_descriptions="-d" in args)


def cmd_find(state: AppState, args: list[str]) -> str:
    """
    /find <text>  -> tree rows whose title contains text (case-insensitive)

    Rows keep the glyphs they have in the full tree.
    """
    _require_args(args, 1, "/find <text>")
    needle = " ".join(args).casefold()
    items = [i for i in build_tree(state.store.list()) if needle in i.task.title.casefold()]
    if not items:
        return f"No tasks match {' '.join(args)!r}."
    return render_tree(items, color=state.color)


def cmd_add(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/add <title>")
    task = state.store.add(" ".join(args))
    return _with_tree(state, f"Added #{task.id}.")


def cmd_sub(state: AppState, args: list[str]) -> str:
    _require_args(args, 2, "/sub <parent_id> <title>")
    parent_id = _parse_id(args[0], "parent task id")
    task = state.store.add(" ".join(args[1:]), parent_id)
    return _with_tree(state, f"Added #{task.id} under #{parent_id}.")


def cmd_done(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/done <id>")
    task_id = _parse_id(args[0])
    state.store.toggle_complete(task_id)
    return _with_tree(state, f"Toggled #{task_id}.")


def cmd_status(state: AppState, args: list[str]) -> str:
    """
    /status <id> todo|doing|done
    (full names not_started / in_progress / completed also work)
    """
    _require_args(args, 2, "/status <id> todo|doing|done")
    task_id = _parse_id(args[0])
    raw = args[1].lower()
    status = _STATUS_ALIASES.get(raw, raw)
    state.store.set_status(task_id, status)
    return _with_tree(state, f"#{task_id} is now {TaskStatus(status).value}.")


def cmd_today(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/today <id>")
    task_id = _parse_id(args[0])
    state.store.toggle_today(task_id)
    task = state.store.get_by_id(task_id)
    note = "scheduled for today" if task.is_today() else "no longer scheduled for today"
    return _with_tree(state, f"#{task_id} {note}.")


def cmd_due(state: AppState, args: list[str]) -> str:
    """
    /due <id> <date>   -> YYYY-MM-DD, MM-DD or DD
    /due <id>          -> clear
    """
    _require_args(args, 1, "/due <id> [YYYY-MM-DD | MM-DD | DD]")
    task_id = _parse_id(args[0])
    if len(args) < 2 or args[1].lower() in _CLEAR_WORDS:
        state.store.set_due_date(task_id, None)
        return _with_tree(state, f"Cleared due date of #{task_id}.")

    due = parse_date_input(args[1])
    state.store.set_due_date(task_id, due)
    return _with_tree(state, f"#{task_id} is due {due}.")


def cmd_desc(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/desc <id> [text]")
    task_id = _parse_id(args[0])
    text = " ".join(args[1:]).replace("\\n", "\n").strip()
    state.store.update_description(task_id, text or None)
    return f"Description of #{task_id} {'updated' if text else 'cleared'}."


def cmd_show(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/show <id>")
    task_id = _parse_id(args[0])
    task = state.store.get_by_id(task_id)
    return render_detail(task, has_children=state.store.has_children(task_id), color=state.color)


def cmd_del(state: AppState, args: list[str]) -> str:
    """
    /del <id>      -> delete (asks for -y when the task has sub-tasks)
    /del <id> -y   -> delete together with all sub-tasks
    """
    _require_args(args, 1, "/del <id> [-y]")
    task_id = _parse_id(args[0])
    task = state.store.get_by_id(task_id)
    if state.store.has_children(task_id) and "-y" not in args[1:]:
        return (
            f"#{task_id} {task.title!r} has sub-tasks; they will be deleted too.\n"
            f"Repeat with /del {task_id} -y to confirm."
        )
    state.store.delete(task_id)
    return _with_tree(state, f"Deleted #{task_id} {task.title!r}.")


# ---- tag commands ----


def cmd_tags(state: AppState, args: list[str]) -> str:
    tags = state.store.list_tags()
    if not tags:
        return "No tags yet. Use /tag <id> <name> or /newtag <name>."
    return "Tags: " + tag_badges(tags, color=state.color)


def cmd_newtag(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/newtag <name> [color]")
    color = args[1] if len(args) > 1 else ""
    tag = state.store.create_tag(args[0], color)
    return f"Created tag {tag_badges([tag], color=state.color)}."


def cmd_tag(state: AppState, args: list[str]) -> str:
    """Assign a tag by name, creating it when it doesn't exist yet."""
    _require_args(args, 2, "/tag <id> <name>")
    task_id = _parse_id(args[0])
    state.store.get_by_id(task_id)
    name = " ".join(args[1:])
    tag = _find_tag(state, name) or state.store.create_tag(name)
    state.store.assign_tag(task_id, tag.id)
    return _with_tree(state, f"Tagged #{task_id} with {name!r}.")


def cmd_untag(state: AppState, args: list[str]) -> str:
    _require_args(args, 2, "/untag <id> <name>")
    task_id = _parse_id(args[0])
    name = " ".join(args[1:])
    tag = _find_tag(state, name)
    if tag is None:
        raise NotFound("tag", name)
    state.store.unassign_tag(task_id, tag.id)
    return _with_tree(state, f"Removed {name!r} from #{task_id}.")


def cmd_deltag(state: AppState, args: list[str]) -> str:
    _require_args(args, 1, "/deltag <name>")
    name = " ".join(args)
    tag = _find_tag(state, name)
    if tag is None:
        raise NotFound("tag", name)
    state.store.delete_tag(tag.id)
    return _with_tree(state, f"Deleted tag {name!r}.")


# ---- AI breakdown ----


def cmd_prompt(state: AppState, args: list[str]) -> str:
    """
    /prompt       -> prompt for breaking down a new goal
    /prompt <id>  -> prompt for breaking down an existing task
    """
    if not args:
        return prompt.generate_new()
    task_id = _parse_id(args[0])
    task = state.store.get_by_id(task_id)
    return prompt.generate_from_task(task, state.store.children_of(task_id))


def cmd_import(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """
    /import <file.yaml>              -> import as root tasks
    /import <file.yaml> <parent_id>  -> import under an existing task
    """
    _require_args(args, 1, "/import <file.yaml> [parent_id]")
    path = Path(args[0]).expanduser()
    parent_id = _parse_id(args[1], "parent task id") if len(args) > 1 else None

    try:
        text = path.read_text("utf-8")
    except OSError as e:
        raise ValidationError(f"cannot read {path}: {e.strerror or e}") from e

    if emit:
        emit(f"Importing {path}...")
    logger.debug("Import requested file=%s parent_id=%s", path, parent_id)

    count = import_yaml(state.store, text, parent_id)
    return _with_tree(state, f"✓ Imported {count} tasks.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the task tree (-d: with descriptions).", aliases=["ls", "l"])
registry.register("find", cmd_find, help_text="Filter the tree by title: /find <text>.", aliases=["f"])
registry.register("add", cmd_add, help_text="Add a root task: /add <title>.", aliases=["a", "n"])
registry.register("sub", cmd_sub, help_text="Add a sub-task: /sub <parent_id> <title>.", aliases=["s"])
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["x"])
registry.register("status", cmd_status, help_text="Set status: /status <id> todo|doing|done.")
registry.register("today", cmd_today, help_text="Toggle 'today' marker: /today <id>.", aliases=["t"])
registry.register("due", cmd_due, help_text="Set/clear due date: /due <id> [date].")
registry.register("desc", cmd_desc, help_text="Set/clear description: /desc <id> [text].", aliases=["e"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("del", cmd_del, help_text="Delete a task and its sub-tasks: /del <id> [-y].", aliases=["d", "rm"])
registry.register("tags", cmd_tags, help_text="List tags.")
registry.register("tag", cmd_tag, help_text="Tag a task: /tag <id> <name>.")
registry.register("untag", cmd_untag, help_text="Untag a task: /untag <id> <name>.")
registry.register("newtag", cmd_newtag, help_text="Create a tag: /newtag <name> [color].")
registry.register("deltag", cmd_deltag, help_text="Delete a tag: /deltag <name>.")
registry.register("prompt", cmd_prompt, help_text="AI breakdown prompt: /prompt [id].", aliases=["g"])
registry.register("import", cmd_import, help_text="Import YAML: /import <file> [parent_id].")
