"""Typer command line interface for n8n-backup."""
