"""
Govee MCP - smart light control for conversational agents.

Discovers and controls Govee devices through the v1 and v2 cloud APIs
or the local UDP protocol behind one command model.
"""

__version__ = "1.0.0"
