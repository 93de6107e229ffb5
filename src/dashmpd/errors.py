#!/usr/bin/python3

"""Exception hierarchy shared by the MPD codecs and document mapper."""


class MPDError(ValueError):
    """
    Base exception for manifest encode / decode failures.

    Carries a short user-facing message and longer internal details that include the
    offending input; str() only ever shows the former.
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


class MalformedDuration(MPDError):
    """Raised when a string does not match the duration grammar."""

    def __init__(self, literal: str, user_message: str = "invalid duration format") -> None:
        super().__init__(user_message, f"{user_message}: {literal!r}")
        self.literal = literal


class MonthsNotSupported(MalformedDuration):
    """Raised when a duration has a non-zero month component."""

    def __init__(self, literal: str) -> None:
        super().__init__(literal, "non-zero value for months is not allowed")


class MalformedConditionalUnit(MPDError):
    """Raised when a value is neither an unsigned integer nor a boolean literal."""

    def __init__(self, literal: str) -> None:
        super().__init__(
            "invalid conditional unit",
            f"expected an unsigned integer or 'true' / 'false', got {literal!r}",
        )
        self.literal = literal


class MPDDecodeError(MPDError):
    """Raised when a manifest document cannot be decoded."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        tag: str | None = None,
        attribute: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.tag = tag
        self.attribute = attribute


ERR_MSG_INVALID_XML = "manifest is not well-formed XML"
ERR_MSG_INVALID_ATTRIBUTE = "invalid attribute value"
ERR_MSG_UNEXPECTED_ROOT = "root element is not MPD"
