"""Core fetch and extraction machinery."""
