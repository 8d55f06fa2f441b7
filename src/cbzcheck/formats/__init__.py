# ABOUTME: Archive formats readable by cbzcheck.
# ABOUTME: Only CBZ (ZIP) archives are supported.
