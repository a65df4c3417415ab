"""
Weight Lifting Exercise quality pipeline
Predicts how well a barbell lift was performed from wearable sensor readings
"""

__version__ = '1.0.0'
