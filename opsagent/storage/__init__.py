"""storage — object-storage access (DigitalOcean Spaces)."""
