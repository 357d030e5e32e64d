"""Jerarquia de errores del nucleo de lecturas."""

from __future__ import annotations


class GlucoTrackError(Exception):
    """Base class for every error raised by gluco_track."""


class ValidationError(GlucoTrackError):
    """A raw reading or input value is malformed."""


class StoreWriteError(GlucoTrackError):
    """A write to the reading store failed; the caller decides on retry."""


class DeviceProtocolError(GlucoTrackError):
    """A device notification payload could not be understood."""


class AuthRequiredError(GlucoTrackError):
    """An operation needs a user identity and none is present."""
