"""Pure scoring and credit calculations."""
