"""Simulated I/O used in mock mode and as a fallback for missing GPIO."""
