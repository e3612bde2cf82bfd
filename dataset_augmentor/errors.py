"""
Exception taxonomy for the augmentation engine.

Only ConfigError and SetupIoError abort a run. CodecError and OperatorError
are recovered per file or per step and only ever show up in the console.
"""


class AugmentationError(Exception):
    """Base class for all errors raised by the augmentation engine."""


class ConfigError(AugmentationError, ValueError):
    """A required setting (e.g. an input or output directory) is missing or invalid."""


class SetupIoError(AugmentationError, OSError):
    """The run cannot be set up: output root not creatable, inputs not enumerable."""


class CodecError(AugmentationError, IOError):
    """An image could not be decoded or encoded."""


class OperatorError(AugmentationError):
    """A transformation failed while being applied to an image."""
