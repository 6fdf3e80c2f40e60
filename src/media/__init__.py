"""Playback engines for prepared streams."""
