"""
ai-changelog: generate changelog entries from a git range with a
language model and merge them into a markdown changelog.
"""

__version__ = "0.1.0"
