"""Light/dark theme preference."""

import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

LIGHT_THEME = {
    'background': '#E8E2D8',
    'card_background': '#FFFFFF',
    'primary_text': '#5C4A3D',
    'secondary_text': '#8B7355',
    'tertiary_text': '#D4CFC5',
    'accent': '#8B7355',
    'accent_dark': '#5C4A3D',
    'border': '#E8E2D8',
    'danger': '#D04444',
}

DARK_THEME = {
    'background': '#1A1613',
    'card_background': '#2D2721',
    'primary_text': '#E8E2D8',
    'secondary_text': '#C4BDB0',
    'tertiary_text': '#8B7355',
    'accent': '#B8A896',
    'accent_dark': '#D4CFC5',
    'border': '#3D3731',
    'danger': '#E87676',
}


class ThemeContext:
    """Current theme plus its persisted preference file."""

    def __init__(self, preferences_path: Optional[str] = None, is_dark: bool = False):
        self.preferences_path = preferences_path
        self.is_dark = is_dark

    @property
    def theme(self) -> Dict[str, str]:
        return DARK_THEME if self.is_dark else LIGHT_THEME

    @property
    def name(self) -> str:
        return 'dark' if self.is_dark else 'light'

    def toggle(self) -> bool:
        """Flip between light and dark and persist the choice."""
        self.is_dark = not self.is_dark
        self.save()
        return self.is_dark

    def load(self):
        """Load the saved preference. A missing or unreadable file leaves the current choice."""
        if not self.preferences_path or not os.path.exists(self.preferences_path):
            return
        try:
            with open(self.preferences_path) as f:
                prefs = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read preferences from {self.preferences_path}: {e}")
            return
        self.is_dark = isinstance(prefs, dict) and prefs.get('theme') == 'dark'

    def save(self):
        if not self.preferences_path:
            return
        prefs = {}
        if os.path.exists(self.preferences_path):
            try:
                with open(self.preferences_path) as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    prefs = loaded
            except (OSError, ValueError):
                prefs = {}
        prefs['theme'] = self.name

        directory = os.path.dirname(self.preferences_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.preferences_path, 'w') as f:
            json.dump(prefs, f)
