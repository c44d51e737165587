# tests/test_importer.py

from __future__ import annotations

import pytest

from flow_tasks.errors import ValidationError
from flow_tasks.tasks.importer import import_yaml, strip_code_block
from flow_tasks.tasks.task_models import TAG_COLOR_PALETTE, Tag
from flow_tasks.tasks.task_store import TaskStore
from flow_tasks.tasks.tree import build_tree

from .fakes import FakeImportRepo

PLAN = """
Here is your plan:

```yaml
tasks:
  - title: "Launch website"
    description: "Public beta"
    due_date: 2025-05-01
    tags: [work, web]
    children:
      - title: "Write copy"
        tags: [work]
      - title: "Deploy"
        children:
          - title: "Configure DNS"
  - title: "Celebrate"
```

Good luck!
"""


def test_strip_code_block_extracts_fenced_yaml() -> None:
    text = "intro\n```yml\ntasks: []\n```\noutro"
    assert strip_code_block(text) == "tasks: []"


def test_strip_code_block_without_fence_is_identity() -> None:
    text = "tasks:\n  - title: x\n"
    assert strip_code_block(text) == text


def test_import_builds_nested_tree(store: TaskStore) -> None:
    count = import_yaml(store, PLAN)
    assert count == 5

    rows = [(i.prefix + i.task.title) for i in build_tree(store.list())]
    assert rows == [
        "Launch website",
        " ├─ Write copy",
        " └─ Deploy",
        "     └─ Configure DNS",
        "Celebrate",
    ]

    launch = store.list()[0]
    assert launch.description == "Public beta"
    assert launch.due_date == "2025-05-01"
    assert [t.name for t in launch.tags] == ["web", "work"]


def test_import_reuses_existing_tags_and_assigns_palette_colors(store: TaskStore) -> None:
    work = store.create_tag("work")  # palette[0]
    import_yaml(store, PLAN)

    tags = {t.name: t for t in store.list_tags()}
    assert set(tags) == {"work", "web"}
    assert tags["work"] == work
    assert tags["web"].color == TAG_COLOR_PALETTE[1]


def test_import_under_parent(store: TaskStore) -> None:
    parent = store.add("Existing")
    count = import_yaml(store, "tasks:\n  - title: Sub A\n  - title: Sub B\n", parent.id)
    assert count == 2
    assert [c.title for c in store.children_of(parent.id)] == ["Sub A", "Sub B"]


@pytest.mark.parametrize(
    "text, message",
    [
        ("tasks: [unclosed", "YAML parse error"),
        ("tasks: []", "no tasks"),
        ("just a string", "no tasks"),
        ("tasks:\n  - description: no title\n", "title is required"),
        ("tasks:\n  - title: ok\n    due_date: someday\n", "invalid date"),
    ],
)
def test_import_errors(store: TaskStore, text: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        import_yaml(store, text)


def test_import_is_not_transactional(store: TaskStore) -> None:
    text = "tasks:\n  - title: first\n  - title: ''\n"
    with pytest.raises(ValidationError):
        import_yaml(store, text)
    assert [t.title for t in store.list()] == ["first"]


def test_import_drives_repo_port_in_order() -> None:
    repo = FakeImportRepo(tags=[Tag(id=1, name="work", color="39")])
    text = (
        "tasks:\n"
        "  - title: A\n"
        "    description: about A\n"
        "    tags: [work, new]\n"
        "    children:\n"
        "      - title: B\n"
    )

    assert import_yaml(repo, text) == 2
    assert repo.calls == [
        "list_tags",
        "add:A",
        "desc:1",
        "assign:1:1",
        "create_tag:new",
        "assign:1:2",
        "add:B",
    ]
    assert repo.tasks[2].parent_id == 1
    assert repo.tags[2].color == TAG_COLOR_PALETTE[1]
