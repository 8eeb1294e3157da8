"""NetworkEvaluator: dense feed-forward pass over a loaded model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from lane_scorer.network.model import Layer, ModelDefinition, ModelLoadError
from lane_scorer.network.model_file import load_model

_logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Base class for failures that prevent a probability from being computed."""


class ModelNotLoadedError(EvaluationError):
    """Raised when no usable model is available."""


class FeatureSizeError(EvaluationError):
    """Raised when the feature vector length differs from the model's ``dim_input``."""


class OutputSizeError(EvaluationError):
    """Raised when the final layer does not produce exactly one value."""


def _dense(layer: Layer, layer_input: Sequence[float]) -> list[float]:
    """Apply one layer: weighted sum plus bias, then the activation."""
    output: list[float] = []
    for col in range(layer.output_dim):
        neuron = layer.bias[col]
        for row in range(layer.input_dim):
            neuron += layer_input[row] * layer.weights[row][col]
        output.append(layer.activation.apply(neuron))
    return output


class NetworkEvaluator:
    """Evaluate a :class:`ModelDefinition` on a feature vector.

    Parameters
    ----------
    model:
        An already-decoded model.  Leave as ``None`` and call
        :meth:`load_model` to read one from disk.
    """

    def __init__(self, model: ModelDefinition | None = None) -> None:
        self._model: ModelDefinition | None = None
        if model is not None:
            try:
                model.validate(require_scalar_output=False)
            except ModelLoadError as exc:
                _logger.error("Rejected in-memory model: %s", exc)
            else:
                self._model = model

    @property
    def model(self) -> ModelDefinition | None:
        return self._model

    @property
    def has_model(self) -> bool:
        return self._model is not None

    def load_model(self, path: str | Path) -> bool:
        """Load the model file at *path*.

        Returns ``True`` on success.  On failure the error is logged and the
        evaluator is left without a usable model until a later load succeeds.
        """
        self._model = None
        try:
            self._model = load_model(path)
        except ModelLoadError as exc:
            _logger.error("%s", exc)
            return False
        _logger.debug("Succeeded in loading the model file: %s.", path)
        return True

    # ------------------------------------------------------------------
    # Forward pass
    # ------------------------------------------------------------------

    def normalize(self, features: Sequence[float]) -> list[float]:
        """Return ``(x - mean) / std`` per input feature.

        Raises:
            ModelNotLoadedError: If no model is loaded.
            FeatureSizeError: If ``len(features) != dim_input``.
        """
        model = self._require_model()
        if len(features) != model.dim_input:
            raise FeatureSizeError(
                f"Model expects {model.dim_input} features, got {len(features)}"
            )
        return [(x - m) / s for x, m, s in zip(features, model.mean, model.std)]

    def forward(self, features: Sequence[float]) -> list[float]:
        """Run every layer and return the final layer's output vector."""
        model = self._require_model()
        layer_input = self.normalize(features)
        for layer in model.layers:
            layer_input = _dense(layer, layer_input)
        return layer_input

    def compute_probability(self, features: Sequence[float]) -> float:
        """Return the model's scalar output for *features*.

        Raises:
            ModelNotLoadedError: If no model is loaded.
            FeatureSizeError: If ``len(features) != dim_input``.
            OutputSizeError: If the final layer has more than one output.
        """
        output = self.forward(features)
        if len(output) != 1:
            raise OutputSizeError(f"Model output layer has incorrect # outputs: {len(output)}")
        return output[0]

    def _require_model(self) -> ModelDefinition:
        if self._model is None:
            raise ModelNotLoadedError("No model loaded")
        return self._model
