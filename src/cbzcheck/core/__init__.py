# ABOUTME: Core checking logic: page inspection, per-book validation, and run reports.
# ABOUTME: Ties the metadata package and the archive reader together.
