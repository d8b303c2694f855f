"""
Error types for Radio Hub

All messages are meant to be shown to a user as-is.
"""


class RadioHubError(Exception):
    """Base class for all Radio Hub errors"""


class SourceUnavailable(RadioHubError):
    """Station listing could not be fetched and no fallback applied"""


class NoStreamAvailable(RadioHubError):
    """No playable stream could be resolved for a station"""


class MetadataUnavailable(RadioHubError):
    """Now-playing metadata could not be refreshed"""


class MalformedEntity(RadioHubError):
    """A single listing item is missing a required field (item is skipped)"""
