"""Exceptions for violated component contracts.

Bad input data is never reported through these exceptions; it is returned as a
`Status`. They are raised only when a caller misuses an item, e.g. by feeding a
value of another kind into an existing item or by changing an identifier that
is immutable once set.
"""

from pigschema.status import StatusCode


class PigContractError(Exception):
    """Base class for programming errors in the use of PIG items."""


class ItemKindMismatchError(PigContractError):
    """An item was given a value declaring a different item kind."""

    def __init__(self, expected: str, actual: object):
        self.expected = expected
        self.actual = actual
        self.code = StatusCode.ITEM_TYPE_CHANGED
        super().__init__(f"item of kind {expected!r} cannot take a value of kind {actual!r}")


class ImmutableFieldError(PigContractError):
    """An attempt was made to change `id` or `specializes` after it was set."""

    def __init__(self, field: str, old: str, new: object):
        self.field = field
        self.old = old
        self.new = new
        self.code = StatusCode.ID_CHANGED if field == "id" else StatusCode.SPECIALIZES_CHANGED
        super().__init__(f"{field} is immutable: cannot change {old!r} to {new!r}")
