"""
Git Workspace Browser.

Serves files and directory listings of git repositories ("workspaces")
as of any branch, tag or commit.
"""

__version__ = "0.1.0"
