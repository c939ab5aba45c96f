"""
Single-slot persistence for the last selected location.
"""
import json
import logging
import os
from typing import Optional

from pydantic import ValidationError

from .config import LOCATION_STORE_PATH
from .models import Location

logger = logging.getLogger(__name__)


class LocationStore:
    """Stores one Location as JSON on disk. The last save wins."""

    def __init__(self, path: str = LOCATION_STORE_PATH):
        self.path = path

    def load(self) -> Optional[Location]:
        """
        Load the saved location.

        Returns:
            The stored Location, or None if nothing usable is stored
        """
        if not os.path.exists(self.path):
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return Location.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable saved location at {self.path}: {e}")
            return None

    def save(self, location: Location) -> None:
        """Overwrite the slot with the given location."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Write then rename; the slot only ever holds a complete document
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(location.model_dump(mode='json'), f)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        """Remove the saved location, if any."""
        if os.path.exists(self.path):
            os.remove(self.path)
