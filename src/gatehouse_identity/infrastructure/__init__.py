"""Identity infrastructure: persistence and notifications."""
