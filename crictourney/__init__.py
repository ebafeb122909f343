"""
crictourney - fantasy cricket tournament match engine
"""
__version__ = "0.1.0"
