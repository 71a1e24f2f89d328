"""
Core utilities shared across the listener, classifier, parsers and worker.
"""
