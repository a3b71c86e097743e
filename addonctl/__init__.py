"""addonctl — fetch and install vendor add-on packages."""

__version__ = "0.1.0"
