# src/flow_tasks/errors.py

"""
Error taxonomy shared by the store, the importer and the console.

- NotFound: an operation referenced a nonexistent id
- ValidationError: empty title, malformed date, unparsable YAML
- ConstraintViolation: duplicate tag name, dangling foreign key
- StorageError: I/O or migration failure (fatal at startup)

The console catches FlowError per command and shows the message.
"""

from __future__ import annotations


class FlowError(Exception):
    """Base class for all errors raised by flow_tasks."""


class NotFound(FlowError):
    def __init__(self, resource: str, resource_id: int | str) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class ValidationError(FlowError):
    pass


class ConstraintViolation(FlowError):
    pass


class StorageError(FlowError):
    pass
