"""MyHub - a small file-based version control engine.

Stages files, freezes them into immutable snapshots, restores any
snapshot and synchronizes the working tree with git remotes.
"""

__version__ = "1.0.0"
__author__ = "myhub"
