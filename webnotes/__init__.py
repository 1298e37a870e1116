"""
WebNotes.

Offline-first note storage for the WebNotes client.

- core/: configuration, logging, exceptions, resilience
- storage/: local, remote and hybrid storage adapters
- cli/: command-line client (Click + Rich)
"""

__version__ = "0.1.0"
