# ABOUTME: cbzcheck - checks CBZ comic archives against their filename and bibliographic metadata.
# ABOUTME: See cbzcheck.cli for the command line entry point.
