"""
Zone classification of accelerometer samples.

Each zone is a fixed box in accelerometer space. Boxes may overlap, so the
classifier tests the currently held zone first: a sample in an overlap region
near a boundary keeps the current zone instead of flickering between two.
Otherwise the boxes are tried in a fixed order (active, inactive, roll) and
the first match wins; a sample outside every box is UNKNOWN.
"""

from typing import Any, Dict, Optional
from glance.core.config import ZoneBox, ZoneConfig
from glance.core.events import Zone

# Order in which boxes are tried once the held zone no longer matches
ZONE_PRIORITY = (Zone.ACTIVE, Zone.INACTIVE, Zone.ROLL)


class ZoneClassifier:
    """Deterministic mapping of (sample, held zone) to a Zone."""

    def __init__(self, config: Optional[ZoneConfig] = None):
        config = config or ZoneConfig()
        self.boxes: Dict[Zone, ZoneBox] = {
            Zone.ACTIVE: config.active,
            Zone.INACTIVE: config.inactive,
            Zone.ROLL: config.roll,
        }

    def classify(self, sample: Any, current_zone: Zone) -> Zone:
        """
        Classify one sample.

        Args:
            sample: Object with x, y, z attributes in milli-g
            current_zone: Zone held before this sample

        Returns:
            The zone for this sample; ``current_zone`` itself if its box still matches
        """
        held_box = self.boxes.get(current_zone)
        if held_box is not None and held_box.contains(sample):
            return current_zone

        for zone in ZONE_PRIORITY:
            if zone is not current_zone and self.boxes[zone].contains(sample):
                return zone
        return Zone.UNKNOWN
