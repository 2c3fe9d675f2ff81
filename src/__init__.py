"""Flyte stack deployer."""
