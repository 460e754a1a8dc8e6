from dataclasses import dataclass, field, replace
from typing import List

@dataclass
class GMDPreferences:
    # Extra directories searched for models given by relative path.
    search_paths: List[str] = field(default_factory=list)
    # Written into the header of every saved model. Nothing reads them back
    # except the dump tool.
    author: str = "Unknown"
    app_name: str = "ogTools"
    # Reject files that fail Model.check() instead of only parsing them.
    strict: bool = False

    def resource_paths(self):
        return [p for p in self.search_paths if p]

_preferences = GMDPreferences()

def get_preferences():
    return _preferences

def set_preferences(prefs=None, **changes):
    """Replace the preferences, or update some fields of the current ones:

        set_preferences(strict=True)
    """
    global _preferences
    _preferences = replace(prefs or _preferences, **changes)
    return _preferences
