"""Application layer: settings, controller and HTTP API."""
