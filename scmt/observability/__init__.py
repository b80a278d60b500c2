"""Process diagnostics for scmt."""
