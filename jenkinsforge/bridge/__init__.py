"""Bridges to external collaborators — the Jenkins remote API."""
