"""
sync-rules - keeps AI assistant rule files consistent across projects
"""

__version__ = "0.1.0"
