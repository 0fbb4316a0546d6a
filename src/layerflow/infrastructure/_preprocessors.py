"""
Input preprocessor facade.

Re-exports the layout-converting preprocessors and the config registry
helpers used to rebuild them.
"""

from .preprocessor._rnn_to_cnn import RnnToCnnPreProcessor
from .preprocessor._serialization import (
    preprocessor_from_config,
    preprocessor_to_config,
    register_preprocessor,
)

__all__ = [
    RnnToCnnPreProcessor.__name__,
    preprocessor_from_config.__name__,
    preprocessor_to_config.__name__,
    register_preprocessor.__name__,
]
