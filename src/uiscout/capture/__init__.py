"""Exploration loop and run wiring."""
