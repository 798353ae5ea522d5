"""Release marker for knife-tools. Not a subcommand."""

VERSION = "1.0.0"
