"""Dep Inspector — ecosystem metadata parsing and dependency-graph assembly.

Turns package-manager metadata (dpkg status files, Alpine installed
databases, requirements files, npm lockfiles, go.mod) into one
deduplicated dependency graph for downstream compliance reporting.
"""

__version__ = "0.1.0"
