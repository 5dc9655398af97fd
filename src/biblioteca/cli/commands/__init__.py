# ABOUTME: Click subcommands registered on the biblioteca root group.
