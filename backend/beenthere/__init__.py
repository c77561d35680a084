"""BeenThere - a small REST service recording which US cities and states users have visited."""

from .version import __version__  # noqa: F401
