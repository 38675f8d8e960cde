"""restartctl subcommands."""
