"""Test package for the FPS keys trainer.

Core tests drive the stats store, key selection and round controller with a
fake clock; headless simulations script whole sessions against a temporary
stats file. To run these tests, execute ``pytest`` from the project root.
"""
