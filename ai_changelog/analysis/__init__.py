"""
Analysis package for ai-changelog.

Pure path heuristics used to drop noisy files from a change set and to
assign the remaining files a logical scope.
"""
