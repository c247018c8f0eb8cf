"""HTTP API for GPU Sizer."""
