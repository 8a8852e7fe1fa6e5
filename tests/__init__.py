"""Test package for the Termi-War shell.

Core tests drive the state machine with a fake clock. The pygame smoke
tests use SDL's dummy video driver so no real window is opened. Run
``pytest`` from the project root.
"""
