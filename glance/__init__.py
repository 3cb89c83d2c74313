"""
Glance - wrist gesture recognition for wearable displays.

This package turns a stream of batched 3-axis accelerometer samples into
debounced activity events for a watch display and its backlight.

Features:
- Geometric zone classification of wrist orientation
- Timer-driven gesture state machine (glance, linger, roll)
- Adaptive accelerometer sampling to save power
- Backlight takeover while the user is glancing
"""

__version__ = "1.0.0"
