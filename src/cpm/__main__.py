"""Allow running as: python -m src.cpm"""
import sys

from .cli import main

sys.exit(main())
