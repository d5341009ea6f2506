from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class FilterAction(enum.Enum):
    PROCEED = "proceed"
    SKIP = "skip"
    FATAL = "fatal"


@dataclass(frozen=True)
class FilterDecision:
    action: FilterAction
    reason: str = ""

    @property
    def proceed(self) -> bool:
        return self.action is FilterAction.PROCEED


PROCEED = FilterDecision(FilterAction.PROCEED)


def check_name(name: str, match_name: str = "", skip_name: str = "") -> FilterDecision:
    """Decide whether an attachment name passes the configured patterns.

    Patterns are searched anywhere in the name. ``match_name`` is checked
    before ``skip_name``; an empty pattern places no constraint.
    """
    if not name:
        return PROCEED

    if match_name:
        try:
            matched = re.search(match_name, name) is not None
        except re.error as exc:
            return FilterDecision(FilterAction.FATAL, f"error in regexp match_name: {exc}")
        if not matched:
            logger.debug("name %s doesn't match match_name %s", name, match_name)
            return FilterDecision(FilterAction.SKIP, f"name {name} doesn't match match_name {match_name}")

    if skip_name:
        try:
            matched = re.search(skip_name, name) is not None
        except re.error as exc:
            return FilterDecision(FilterAction.FATAL, f"error in regexp skip_name: {exc}")
        if matched:
            logger.debug("name %s matches skip_name %s", name, skip_name)
            return FilterDecision(FilterAction.SKIP, f"name {name} matches skip_name {skip_name}")

    return PROCEED
