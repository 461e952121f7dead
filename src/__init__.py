"""
Virtual Audio Installer — bundled virtual audio driver installation.
"""

__version__ = "0.1.0"
