"""Theme portal: submission & moderation core, JSON API, and client."""
