"""depsize — transitive npm dependency size calculator."""

__version__ = "0.1.0"
