"""Versioned sheet naming."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "Intake_"


def resolve_name(
    template_name: str,
    exists: Callable[[str], bool],
    force_new: bool = False,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """
    Pick a sheet name for a template that does not collide with existing ones.

    The base name is ``{prefix}{template_name}``. It is used as is unless it
    already exists or ``force_new`` is set; otherwise ``_v2``, ``_v3`` and
    so on are tried until a free name is found. The search has no upper
    bound.

    Args:
        template_name: Template name from the intake document.
        exists: Lookup telling whether a sheet name is taken.
        force_new: Skip the base name even when it is free.
        prefix: Sheet name prefix.

    Returns:
        The first free candidate name.
    """
    base_name = f"{prefix}{template_name}"

    if not force_new and not exists(base_name):
        return base_name

    version = 2
    while exists(f"{base_name}_v{version}"):
        version += 1

    name = f"{base_name}_v{version}"
    logger.info(f"Resolved versioned sheet name '{name}'")
    return name


class NamingResolver:
    """Resolves sheet names against one sheet namespace."""

    def __init__(self, exists: Callable[[str], bool], prefix: str = DEFAULT_PREFIX):
        self._exists = exists
        self.prefix = prefix

    def resolve(self, template_name: str, force_new: bool = False) -> str:
        return resolve_name(template_name, self._exists, force_new=force_new, prefix=self.prefix)
