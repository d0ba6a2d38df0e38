"""
ghprs utilities
"""
