"""Maintenance-release orchestration for simulation release branches."""
