"""
Scheduling engine, metrics and the collaborators that render its results.
"""
