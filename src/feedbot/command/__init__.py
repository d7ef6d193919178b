"""
Command layer for feedbot.

- **router.py**: prefix detection, tokenizing and fault-isolated dispatch
- **handlers.py**: one coroutine per verb (help, add, remove, list, set)
- **permissions.py**: administrator gate
- **config_resolver.py**: embed/webhook on/off/inherit settings
- **contact_resolver.py**: emergency contact parsing
- **validation.py**: shared argument and ownership checks
"""
