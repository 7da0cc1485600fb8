"""Internal link injection for rendered article HTML."""

__version__ = "1.0.0"
