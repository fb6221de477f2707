"""
Utility functions for the book viewer
"""
