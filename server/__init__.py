"""HTTP transport for 200."""
