"""Core: domain models, contracts and orchestration services."""
