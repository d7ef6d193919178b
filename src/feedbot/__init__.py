"""
feedbot - Discord feed subscription bot

feedbot lets guild administrators subscribe channels to RSS/Atom feeds and
control how updates are delivered.

Core Components:

- **Command Router**: recognises ``/feed:`` or @mention invocations and
  dispatches them to verb handlers inside a per-dispatch isolation boundary
- **Permission Gate**: restricts every mutating or listing command to members
  holding the ADMINISTRATOR permission
- **Delivery Settings**: guild-wide embed/webhook defaults with per-subscription
  on/off/inherit overwrites
- **Storage**: SQLite (aiosqlite) store for feeds, subscriptions and guild
  configuration

Usage:
    from feedbot.main import main
    main()
"""
