"""MapTracker: minimap localization and waypoint navigation.

Subpackages:
- vision: integral-image statistics, NCC matching, map recognition
- controllers: localization service
- navigation: run parameters, actions, notifications, navigation loop
- io: screen capture and input injection
- core: configuration, logging, error taxonomy
"""

__version__ = "0.1.0"
