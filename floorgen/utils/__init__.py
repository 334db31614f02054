"""Small helpers shared by the HTTP layer and the CLI."""
