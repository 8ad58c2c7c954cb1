"""JSON API for theme submission and moderation."""
