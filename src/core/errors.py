"""Error taxonomy for the itinerary pipeline.

Only ``GenerationFailed`` (and its timeout subclass) ever reaches callers of
the generator. ``ResolverUpstreamError`` is recovered inside the place
resolver and ``ToolContractViolation`` is reported back to the model as a
failed tool call.
"""
from __future__ import annotations


class ItineraryError(Exception):
    """Base class for all pipeline errors."""


class GenerationFailed(ItineraryError):
    """The model produced no usable structured payload."""


class GenerationTimeout(GenerationFailed):
    """The generation exceeded its time budget and was abandoned."""


class ToolContractViolation(ItineraryError, ValueError):
    """A place lookup was requested with arguments outside the tool schema."""


class ResolverUpstreamError(ItineraryError):
    """The places upstream failed (transport, status, body or credential)."""
