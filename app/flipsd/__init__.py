"""flipsd - Flipper Zero SD card builder.

Pulls the community Playground repository, organizes it into the
Flipper's SD card layout and mirrors it onto a mounted card.
"""

__version__ = "2.0.0"
