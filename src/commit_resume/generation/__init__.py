"""Resume generation on top of an external text-generation CLI.

The commit document is grouped by month, each month is summarized into a
section, and the sections are restructured into one final resume.
"""
