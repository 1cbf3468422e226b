"""Tax-return snapshot models."""
