"""Discord-facing pieces: session identity, directory adapter and cogs."""
