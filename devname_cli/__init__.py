"""
devname_cli - Command Line Interface for the Device Rename Tool
"""

from .cli_entry import main

__all__ = ["main"]
