"""Shared helpers: dates, amounts, sanitizing and logging."""
