"""Token encoding and key handling."""
