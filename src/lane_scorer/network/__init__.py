"""Feed-forward network model and evaluation.

Public API
----------
ModelDefinition   - immutable dims, weights, biases and normalization stats
Layer, Activation - one dense layer and its nonlinearity
NetworkEvaluator  - normalization + forward pass → probability
load_model        - read a binary model file
save_model        - write a binary model file
"""

from lane_scorer.network.evaluator import (
    EvaluationError,
    FeatureSizeError,
    ModelNotLoadedError,
    NetworkEvaluator,
    OutputSizeError,
)
from lane_scorer.network.model import (
    Activation,
    Layer,
    ModelDefinition,
    ModelFormatError,
    ModelLoadError,
)
from lane_scorer.network.model_file import decode_model, encode_model, load_model, save_model

__all__ = [
    "Activation",
    "EvaluationError",
    "FeatureSizeError",
    "Layer",
    "ModelDefinition",
    "ModelFormatError",
    "ModelLoadError",
    "ModelNotLoadedError",
    "NetworkEvaluator",
    "OutputSizeError",
    "decode_model",
    "encode_model",
    "load_model",
    "save_model",
]
