"""wk - a small command-line time tracker"""

__version__ = "0.1.0"
