"""Test package for the reaction trainer.

Core tests drive the game controller, scheduler and interpolator with a fake
clock; the smoke tests run the pygame shell headlessly using the dummy video
driver. To run these tests, execute ``pytest`` from the project root.
"""
