"""
Error taxonomy.

Every failure except TaskNotFound aborts the current invocation.
"""


class WkError(Exception):
    """Base class for all errors raised by wk"""


class StorageUnavailable(WkError):
    """The store file or its directory cannot be opened or created"""


class SchemaError(WkError):
    """Table creation failed"""


class DuplicateNameError(WkError):
    """A task with this name already exists"""

    def __init__(self, name: str):
        super().__init__(f"Task already exists: {name}")
        self.name = name


class TaskNotFound(WkError):
    """No task with this name exists. Reported to the user, not fatal."""

    def __init__(self, name: str):
        super().__init__(f"Task not found: {name}")
        self.name = name


class QueryError(WkError):
    """Storage-layer failure while reading or writing"""


class ConfigError(WkError):
    """settings.yaml or a WK_ environment variable holds an unusable value"""
