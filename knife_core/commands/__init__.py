"""Built-in knife subcommands. Files here are discovered and loaded by path, not imported."""
