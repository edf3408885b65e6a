"""Development-only HTTP surface."""
