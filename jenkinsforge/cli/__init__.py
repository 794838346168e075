"""jenkinsforge CLI — Typer-based command line interface."""
