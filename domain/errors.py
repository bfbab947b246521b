class ValidationError(ValueError):
    """Raised when domain data is invalid."""


class MissingIdentifier(ValidationError):
    """An aggregate or a reference to one has an empty id."""


class EmptyItemList(ValidationError):
    """An order was given no items."""


class InvalidQuantity(ValidationError):
    """An order holds an item with a non-positive quantity."""


class ItemNotFound(ValidationError):
    """The requested item is not part of the order."""
