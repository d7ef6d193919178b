"""
Configuration management for feedbot.

- **app_configuration.py**: YAML configuration loader for global settings
  (database path, ``list`` page size, Discord request deadline, presence text).
  Falls back to defaults on missing or malformed config files.
"""
