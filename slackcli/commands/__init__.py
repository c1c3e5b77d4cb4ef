"""Typer sub-apps, one per noun."""
