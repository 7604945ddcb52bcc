"""CLI command modules for obsidian-card-sync.

- shared.py: Common utilities (config/logger loading, console)
- core_commands.py: Command registration (sync, inspect, check)
- sync_handler.py: Command implementations
"""
