"""
Language-model integration for ai-changelog.

The interface module defines what the pipeline needs from a model; the
response module turns raw model text into validated entries; concrete
clients live alongside them.
"""
