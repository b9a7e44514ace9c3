"""Exception hierarchy for schema modelling and PQL query building."""


class PilosaError(Exception):
    """Base exception for schema and query building errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class InvalidNameError(PilosaError):
    """Raised when an index name, field name or attribute label is invalid."""


class InvalidFieldOptionError(PilosaError):
    """Raised when a field option sequence is malformed."""


class ArityError(PilosaError):
    """Raised when an operation receives too few bitmap arguments."""


class SerializationError(PilosaError):
    """Raised when an attribute or filter value cannot be encoded."""


class PQLSyntaxError(PilosaError):
    """Raised when PQL text cannot be parsed."""


# Sanitized user-facing error message constants
ERR_MSG_INVALID_INDEX_NAME = "invalid index name"
ERR_MSG_INVALID_FIELD_NAME = "invalid field name"
ERR_MSG_INVALID_LABEL = "invalid label"
ERR_MSG_INVALID_FIELD_OPTION = "invalid field option"
ERR_MSG_INVALID_ARGUMENT = "invalid query argument"
ERR_MSG_INVALID_ATTRIBUTE_VALUE = "invalid attribute value"
ERR_MSG_INVALID_FILTER_VALUE = "invalid filter value"
ERR_MSG_PQL_SYNTAX = "invalid PQL syntax"
