"""
Pinger Core - System identity reporting for image-based Linux hosts.

Derives a small fact-sheet about the running machine (platform, original
and current OS version, cloud instance type) and reports it to a
configured endpoint.
"""

__version__ = "0.3.0"
__author__ = "Pinger Core developers"

__all__ = ["__version__"]
