"""
Quiz play service - timed quiz sessions with server-issued start tokens
"""
__version__ = "1.0.0"
