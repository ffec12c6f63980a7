"""Infrastructure services: storage, logs, orchestration, parsing."""
