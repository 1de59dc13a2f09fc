"""HTTP service that steps a live simulation and streams its state."""
