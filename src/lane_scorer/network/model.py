"""Feed-forward network model definition."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

_logger = logging.getLogger(__name__)


class ModelLoadError(Exception):
    """Raised when a model file cannot be opened or parsed."""


class ModelFormatError(ModelLoadError):
    """Raised when a decoded model violates its shape invariants."""


# ---------------------------------------------------------------------------
# Activations
# ---------------------------------------------------------------------------

def relu(x: float) -> float:
    return max(0.0, x)


def sigmoid(x: float) -> float:
    # Split on sign so math.exp never overflows.
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


class Activation(Enum):
    """Layer nonlinearity, resolved once from the model file's name tag."""

    RELU = "relu"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    UNKNOWN = "unknown"
    """Unrecognised name; evaluated as sigmoid."""

    @classmethod
    def from_name(cls, name: str) -> Activation:
        """Map a model-file activation name to an :class:`Activation`.

        Unrecognised names map to :attr:`UNKNOWN` and log a warning.
        """
        for member in (cls.RELU, cls.SIGMOID, cls.TANH):
            if name == member.value:
                return member
        _logger.warning(
            "Undefined activation func: %r, and default sigmoid will be used instead.", name
        )
        return cls.UNKNOWN

    def apply(self, x: float) -> float:
        if self is Activation.RELU:
            return relu(x)
        if self is Activation.TANH:
            return math.tanh(x)
        return sigmoid(x)


# ---------------------------------------------------------------------------
# Model definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Layer:
    """One dense layer.

    ``weights[row][col]`` connects input ``row`` to output ``col``.
    """

    input_dim: int
    output_dim: int
    weights: tuple[tuple[float, ...], ...]
    bias: tuple[float, ...]
    activation: Activation
    activation_name: str
    """Name as stored in the model file (kept for inspection and re-encoding)."""

    @classmethod
    def build(
        cls,
        weights: list[list[float]],
        bias: list[float],
        activation: str,
    ) -> Layer:
        """Convenience constructor inferring dims from *weights*."""
        input_dim = len(weights)
        output_dim = len(bias)
        return cls(
            input_dim=input_dim,
            output_dim=output_dim,
            weights=tuple(tuple(float(w) for w in row) for row in weights),
            bias=tuple(float(b) for b in bias),
            activation=Activation.from_name(activation),
            activation_name=activation,
        )


@dataclass(frozen=True)
class ModelDefinition:
    """An immutable, already-trained dense network with input normalization."""

    dim_input: int
    mean: tuple[float, ...]
    std: tuple[float, ...]
    layers: tuple[Layer, ...]

    @property
    def num_layer(self) -> int:
        return len(self.layers)

    def validate(self, require_scalar_output: bool = True) -> ModelDefinition:
        """Check shape invariants and return ``self``.

        Args:
            require_scalar_output: Also require the final layer to produce
                exactly one output.

        Raises:
            ModelFormatError: On any inconsistency between declared dims,
                normalization arrays, weights and biases.
        """
        if self.dim_input <= 0:
            raise ModelFormatError(f"dim_input must be positive, got {self.dim_input}")
        if len(self.mean) != self.dim_input or len(self.std) != self.dim_input:
            raise ModelFormatError(
                f"Normalization arrays have {len(self.mean)}/{len(self.std)} "
                f"entries, expected {self.dim_input}"
            )
        if not self.layers:
            raise ModelFormatError("Model has no layers")

        expected_input = self.dim_input
        for i, layer in enumerate(self.layers):
            if layer.input_dim != expected_input:
                raise ModelFormatError(
                    f"Layer {i} input_dim {layer.input_dim} != previous output {expected_input}"
                )
            if len(layer.weights) != layer.input_dim or any(
                len(row) != layer.output_dim for row in layer.weights
            ):
                raise ModelFormatError(
                    f"Layer {i} weights are not {layer.input_dim} x {layer.output_dim}"
                )
            if len(layer.bias) != layer.output_dim:
                raise ModelFormatError(
                    f"Layer {i} bias has {len(layer.bias)} entries, expected {layer.output_dim}"
                )
            expected_input = layer.output_dim

        if require_scalar_output and expected_input != 1:
            raise ModelFormatError(f"Final layer has {expected_input} outputs, expected 1")
        return self
