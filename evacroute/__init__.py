"""Fire-aware evacuation routing with reactive re-planning."""

__version__ = "0.1.0"
