"""outliner.utilities - Small helpers shared across the package."""
