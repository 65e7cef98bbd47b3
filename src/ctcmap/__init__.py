"""ctcmap - Cell Tracking Challenge AOGM/TRA measures from node mappings."""

__version__ = "0.1.0"
