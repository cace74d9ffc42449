"""
ProjectPilot: project management API with task estimation, suggestion and workflow analysis
"""
__version__ = "1.0.0"
