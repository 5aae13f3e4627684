"""G25 Atlas: G25 genetic-distance engine and ancient-DNA sample map projection."""

__version__ = "0.1.0"
