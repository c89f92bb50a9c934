"""DepGraph CLI — dependency graph analysis and class-hierarchy exploration."""

__version__ = "0.3.0"
