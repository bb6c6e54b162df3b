"""Session records, lifecycle and turn handling."""
