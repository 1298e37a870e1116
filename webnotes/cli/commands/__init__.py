"""
CLI Commands.

Organized by domain/feature area.
"""

from webnotes.cli.commands.folders import folders
from webnotes.cli.commands.notes import notes
from webnotes.cli.commands.settings import settings
from webnotes.cli.commands.sync import sync

__all__ = [
    "folders",
    "notes",
    "settings",
    "sync",
]
