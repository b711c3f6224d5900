"""Shared utilities and telemetry used by every layer. No business logic."""
