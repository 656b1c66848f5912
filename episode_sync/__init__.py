"""Sync a podcast's episode catalog from the Spotify Web API into a JSON snapshot."""
