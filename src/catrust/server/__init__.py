"""Production server runners for catrust."""
