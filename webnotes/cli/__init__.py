"""
CLI Module.

Command-line client over the storage layer, built with Click and Rich.

Architecture:
- CLI is a thin presentation layer
- Every command builds one HybridCoordinator, refreshes the session,
  runs a single storage operation and closes the coordinator
- --offline keeps everything in the local store

Usage:
    webnotes --help
    webnotes notes list
    webnotes --offline notes create --title "Groceries"
    webnotes sync status
"""
