"""
slotplanner - generate, filter and summarize appointment slots across
timezones.
"""

__version__ = "0.1.0"
