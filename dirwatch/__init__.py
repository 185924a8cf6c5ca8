"""
dirwatch - restart a command whenever a directory tree changes.

Watches the current directory recursively and, after each debounced batch of
changes, stops the running command, waits for it to exit, and starts it again.
"""

__version__ = "0.1.0"
__author__ = "Philip Orange <git@philiporange.com>"
