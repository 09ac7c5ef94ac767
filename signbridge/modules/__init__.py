"""Application modules for the sign recognition pipeline."""
