# wavtempo/cli/__init__.py

"""
Command-line interface for wavtempo (Click).
"""
