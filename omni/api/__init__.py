"""HTTP API (process shell): health probes only."""
