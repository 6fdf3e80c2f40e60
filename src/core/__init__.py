"""Client core: transport, catalog, playback sessions and settings."""
