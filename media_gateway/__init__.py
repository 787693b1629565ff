"""Media conversion gateway: image and video conversion over HTTP."""

__all__ = ["__version__"]

__version__ = "1.0.0"
