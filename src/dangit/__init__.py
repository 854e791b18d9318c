"""dangit - a terminal dashboard for your open GitHub work."""

try:
    from ._version import __version__
except ImportError:
    try:
        from importlib.metadata import version

        __version__ = version("dangit")
    except Exception:
        __version__ = "0.0.0+unknown"
