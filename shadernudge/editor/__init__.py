"""Qt editor integration for live nudging."""
