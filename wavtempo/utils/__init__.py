# wavtempo/utils/__init__.py

"""
Utility helpers shared across wavtempo (logging setup).
"""
