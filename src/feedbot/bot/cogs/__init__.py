"""Cogs registered on the py-cord bot at startup."""
