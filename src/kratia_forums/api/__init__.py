"""HTTP API for Kratia Forums."""
