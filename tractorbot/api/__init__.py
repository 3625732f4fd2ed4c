"""HTTP channel adapter."""
