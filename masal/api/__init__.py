"""HTTP API for the Masal Makinesi story service."""
