"""
quotesync — a local quote collection that reconciles with a remote feed.

Quotes live on disk. A periodic sync pulls the remote page,
applies server values by default, and keeps conflicts around
until a human decides which side wins.
"""

import os

__version__ = "0.1.0"

QUOTESYNC_HOME = os.environ.get("QUOTESYNC_HOME", "~/.quotesync")
