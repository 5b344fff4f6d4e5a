"""
Per-user filtering of classified signals.
"""

from typing import Optional

from competitor_intel.models import UserPreferences


def should_keep_signal(signal_type: str, preferences: Optional[UserPreferences]) -> bool:
    """Decide whether a signal of this type should be stored for the user.

    A user without a preferences record gets every signal type.
    """
    if preferences is None:
        return True
    return signal_type in preferences.signal_types
