"""
LayerFlow: per-layer adaptive gradient updates and RNN/CNN layout conversion.
"""

__version__ = "0.1.0"
