# ABOUTME: Subcommands of the cbzcheck CLI.
# ABOUTME: Each module defines one Click command registered in cbzcheck.cli.
