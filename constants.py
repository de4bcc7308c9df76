# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs. They
shape how the filings look on screen rather than how they move, so they are
not part of the experimental configuration in config.json.
"""

# Visualization settings
WINDOW_TITLE = "Iron Filings"
FPS = 60
BACKGROUND_COLOR = (10, 10, 10) # Near black

# --- Trail Effect ---
# Alpha value for the fading background (0-255). Lower is a longer trail.
MOTION_BLUR_ALPHA = 50

# --- Filing Shape ---
# Each particle is drawn as a short stroke aligned with its velocity.
FILING_HALF_LENGTH = 2.0
FILING_STROKE_WIDTH = 2

# Used when the config does not provide a tint or the tint cannot be parsed.
DEFAULT_FILING_TINT = (200, 200, 255, 150) # Silvery blue
