"""
bootup-checks: pre-launch dependency and port checks for a server process.
"""

__version__ = "0.1.0"
