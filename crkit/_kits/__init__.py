"""
Ready-made typed shapes of some well-known custom resources.
"""
