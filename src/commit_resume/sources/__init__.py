"""Remote sources for commit-resume.

Sources talk to GitHub through the gh CLI to discover which account and
repositories to harvest.
"""
