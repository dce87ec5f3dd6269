# spurilo/errors

"""
spurilo.errors

Central exception hierarchy for spurilo.

Callers can catch SpuriloError (broad) or specific subclasses (narrow).
Only structural, configuration and parse errors abort an analysis; enrichment
and render failures are reported as warnings by the callers that catch them.
"""


class SpuriloError(RuntimeError):
    """Base class for all spurilo runtime errors."""


# ---- Input errors ------------------------------

class InvalidGpxError(SpuriloError):
    """GPX file could not be parsed or did not contain expected data structures."""

class StructuralError(SpuriloError):
    """The track has no tracks, segments or waypoints to analyze."""


# ---- Configuration errors ----------------------

class ConfigurationError(SpuriloError):
    """Invalid configuration file or out-of-range threshold / epsilon values."""


# ---- Side-channel errors (non-fatal) -----------

class EnrichmentError(SpuriloError):
    """Reverse geocoding was unreachable or returned a malformed response."""

class RenderError(SpuriloError):
    """The elevation profile image could not be drawn or written."""
