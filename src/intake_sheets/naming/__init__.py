"""Sheet naming for the Intake Sheets system."""

from .resolver import DEFAULT_PREFIX, NamingResolver, resolve_name

__all__ = [
    "DEFAULT_PREFIX",
    "NamingResolver",
    "resolve_name",
]
