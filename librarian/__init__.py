"""Resource discovery and aggregation engine for a university portal."""
