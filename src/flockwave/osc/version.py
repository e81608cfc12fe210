"""Version information for the Flockwave OSC library."""

__all__ = ("__version__", "__version_info__")

__version_info__ = (0, 4, 0)
__version__ = ".".join(str(x) for x in __version_info__)
