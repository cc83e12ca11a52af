"""HTTP API: research episode streaming and strategy evolution history."""
