"""
Application services package
"""
