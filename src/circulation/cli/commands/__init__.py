# ABOUTME: Click subcommands for the circulation CLI.
# ABOUTME: Each module defines one command registered on the top-level group.
