"""Errors raised by warden"""


class WardenError(Exception):
    """Base class for all warden errors."""


class InvalidIdentity(WardenError):
    """The phone number or email address failed the channel's format check."""

    def __init__(self, channel, identity: str):
        self.channel = channel
        self.identity = identity
        super().__init__(f"Invalid identity for channel {channel}.")


class MissingIdentity(WardenError):
    """The channel needs a phone number or email the account does not have."""

    def __init__(self, channel):
        self.channel = channel
        super().__init__(f"No identity on file for channel {channel}.")


class UnsupportedChannel(WardenError):
    """The operation does not apply to the given channel."""

    def __init__(self, channel, operation: str):
        self.channel = channel
        self.operation = operation
        super().__init__(f"{operation} is not supported for channel {channel}.")


class RetryableError(WardenError):
    """An upstream failure the caller may retry."""


class DeliveryError(RetryableError):
    """A delivery gateway did not accept the message."""

    def __init__(self, channel, message: str = "Failed to send code, try again."):
        self.channel = channel
        super().__init__(message)


class StorageUnavailable(RetryableError):
    """The backing store could not be read or written."""
