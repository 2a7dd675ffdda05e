"""PhotoScope: query a photo-sharing API by keyword or location and rank the results."""

__version__ = "0.1.0"
