"""Typed records shared across feedbot: Discord IDs and feed/subscription data."""
