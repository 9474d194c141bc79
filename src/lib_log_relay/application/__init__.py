"""Application layer: ports and use cases of the telemetry relay."""
