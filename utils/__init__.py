"""
Shared utilities for the Exam Extractor
"""
