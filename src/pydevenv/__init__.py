"""pydevenv: companion project for the Python development environment guide."""
