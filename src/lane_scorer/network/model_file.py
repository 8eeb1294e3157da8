"""Binary model file codec.

Layout (little-endian, no padding)::

    header   : magic b"FNNM" | uint32 version | int32 dim_input | int32 num_layer
    stats    : float64[dim_input] samples_mean | float64[dim_input] samples_std
    layer[i] : int32 input_dim | int32 output_dim
               uint16 name_len | utf-8 activation name
               float64[input_dim * output_dim] weights (row-major)
               float64[output_dim] bias
"""

from __future__ import annotations

import struct
from pathlib import Path

from lane_scorer.network.model import (
    Activation,
    Layer,
    ModelDefinition,
    ModelFormatError,
    ModelLoadError,
)

MAGIC = b"FNNM"
FORMAT_VERSION = 1

_HEADER = struct.Struct("<4sIii")
_LAYER_DIMS = struct.Struct("<ii")
_NAME_LEN = struct.Struct("<H")

# Guards against allocating absurd arrays from a corrupt header.
_MAX_DIM = 1 << 16


class _Cursor:
    """Sequential reader over a byte buffer."""

    def __init__(self, buf: bytes) -> None:
        self._buf = buf
        self.offset = 0

    def unpack(self, fmt: struct.Struct) -> tuple:
        if self.offset + fmt.size > len(self._buf):
            raise ModelFormatError(f"Truncated model data at byte {self.offset}")
        values = fmt.unpack_from(self._buf, self.offset)
        self.offset += fmt.size
        return values

    def doubles(self, count: int) -> tuple[float, ...]:
        return self.unpack(struct.Struct(f"<{count}d"))

    def raw(self, count: int) -> bytes:
        if self.offset + count > len(self._buf):
            raise ModelFormatError(f"Truncated model data at byte {self.offset}")
        data = self._buf[self.offset : self.offset + count]
        self.offset += count
        return data

    @property
    def remaining(self) -> int:
        return len(self._buf) - self.offset


def _check_dim(name: str, value: int) -> int:
    if not 0 < value <= _MAX_DIM:
        raise ModelFormatError(f"{name} out of range: {value}")
    return value


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_model(data: bytes) -> ModelDefinition:
    """Decode and validate a :class:`ModelDefinition` from *data*.

    Raises:
        ModelFormatError: If the bytes do not match the expected layout or the
            decoded model is inconsistent.
    """
    cur = _Cursor(data)
    magic, version, dim_input, num_layer = cur.unpack(_HEADER)
    if magic != MAGIC:
        raise ModelFormatError(f"Bad magic {magic!r}, expected {MAGIC!r}")
    if version != FORMAT_VERSION:
        raise ModelFormatError(f"Unsupported model format version {version}")
    _check_dim("dim_input", dim_input)
    _check_dim("num_layer", num_layer)

    mean = cur.doubles(dim_input)
    std = cur.doubles(dim_input)

    layers: list[Layer] = []
    for _ in range(num_layer):
        input_dim, output_dim = cur.unpack(_LAYER_DIMS)
        _check_dim("input_dim", input_dim)
        _check_dim("output_dim", output_dim)
        (name_len,) = cur.unpack(_NAME_LEN)
        try:
            name = cur.raw(name_len).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ModelFormatError(f"Activation name is not UTF-8: {exc}") from exc
        flat = cur.doubles(input_dim * output_dim)
        weights = tuple(
            flat[row * output_dim : (row + 1) * output_dim] for row in range(input_dim)
        )
        bias = cur.doubles(output_dim)
        layers.append(Layer(
            input_dim=input_dim,
            output_dim=output_dim,
            weights=weights,
            bias=bias,
            activation=Activation.from_name(name),
            activation_name=name,
        ))

    if cur.remaining:
        raise ModelFormatError(f"{cur.remaining} trailing bytes after last layer")

    return ModelDefinition(
        dim_input=dim_input,
        mean=mean,
        std=std,
        layers=tuple(layers),
    ).validate()


def load_model(path: str | Path) -> ModelDefinition:
    """Read and decode the model file at *path*.

    Raises:
        ModelLoadError: If the file cannot be read or is not a valid model.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ModelLoadError(f"Unable to open the model file: {path}: {exc}") from exc
    try:
        return decode_model(data)
    except ModelFormatError as exc:
        raise ModelFormatError(f"Unable to load the model file: {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_model(model: ModelDefinition) -> bytes:
    """Serialise *model* to the binary layout described in the module docstring."""
    parts = [
        _HEADER.pack(MAGIC, FORMAT_VERSION, model.dim_input, model.num_layer),
        struct.pack(f"<{model.dim_input}d", *model.mean),
        struct.pack(f"<{model.dim_input}d", *model.std),
    ]
    for layer in model.layers:
        name = layer.activation_name.encode("utf-8")
        flat = [w for row in layer.weights for w in row]
        parts.append(_LAYER_DIMS.pack(layer.input_dim, layer.output_dim))
        parts.append(_NAME_LEN.pack(len(name)))
        parts.append(name)
        parts.append(struct.pack(f"<{len(flat)}d", *flat))
        parts.append(struct.pack(f"<{layer.output_dim}d", *layer.bias))
    return b"".join(parts)


def save_model(model: ModelDefinition, path: str | Path) -> None:
    """Write *model* to *path*."""
    Path(path).write_bytes(encode_model(model))
