"""HTTP API for the GRC Audit Workpapers system."""
