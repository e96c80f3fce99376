"""
jinspect Shared Module
======================

Configuration, logging and console utilities shared by the jinspect
decoder and its command-line front end.
"""

from shared.config import InspectConfig

__all__ = ["InspectConfig"]
