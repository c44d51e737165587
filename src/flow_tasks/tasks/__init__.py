"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Tag, TaskStatus)
- task_store.py: SQLite-backed storage
- migrations.py: versioned additive schema migrations
- tree.py: flat task list -> indented tree rows
- importer.py / prompt.py: YAML import and AI breakdown prompts
- dates.py: date validation and user date input
"""
