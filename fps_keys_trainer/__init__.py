"""Adaptive reflex trainer for the terminal.

Prompts one key at a time, times the press, and weights the next prompt
toward the keys you are slowest or least accurate on.
"""

__version__ = "2.0.0"
