"""
People directory application package
"""
