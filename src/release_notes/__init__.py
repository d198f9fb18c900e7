"""GitHub release notes generator.

Collects the pull requests merged and the issues closed between two
releases of a repository (and, optionally, of its pinned dependencies)
and renders them as a markdown document.
"""

__version__ = "0.1.0"
