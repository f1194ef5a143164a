"""Movies API: catalog listing, filtering, pagination and rating aggregation."""

__version__ = "1.0.0"
