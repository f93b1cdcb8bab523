# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   Exceptions raised by the migrator. Nothing in the core catches
#   these; they unwind out of the current collection and the caller
#   decides whether to abort or continue with the next one.
#
# CLASSES:
# --------
# - MigrationError            → base class
# - ConnectivityError         → source or destination unreachable
# - NotConnectedError         → client used before connect()
# - SchemaConflictError       → value cannot be stored in the committed column type
#
# ==============================================


class MigrationError(Exception):
    """Base class for all migrator errors."""


class ConnectivityError(MigrationError):
    """The source or destination store could not be reached."""


class NotConnectedError(MigrationError):
    """A client method was called before connect()."""


class SchemaConflictError(MigrationError):
    """
    A document value does not fit the type its column was created with.

    Column types are committed the first time a field is seen. A later
    document carrying an incompatible value for the same field ends up here.
    """

    def __init__(self, table_name: str, column_name: str, column_type: str, value_kind: str):
        self.table_name = table_name
        self.column_name = column_name
        self.column_type = column_type
        self.value_kind = value_kind
        super().__init__(
            f'Column "{table_name}"."{column_name}" is {column_type}, '
            f"cannot store a {value_kind} value"
        )
