"""
jinspect Module Entry Point
============================

Allows running the jinspect CLI via: python -m jinspect
"""

from jinspect.cli import main

if __name__ == "__main__":
    main()
