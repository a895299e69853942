"""
Test suite for the docx_merger project.

Unit tests live in per-area subdirectories (parsers, models, merger,
utils); end-to-end merges live in integration/.
"""
