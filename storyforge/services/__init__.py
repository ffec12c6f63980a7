"""Service layer: infrastructure, providers, pipeline and use cases."""
