"""
playdeck - playback queue controller with shuffle, repeat and session restore
"""

__version__ = "0.1.0"
