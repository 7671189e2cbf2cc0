"""HTTP API: chat streaming, sessions and canvases."""
