"""
RNN -> CNN input preprocessor.

This module provides `RnnToCnnPreProcessor`, which lets a recurrent
(sequence-major) layer feed a convolutional (spatial-major) layer:

- forward (`pre_process`): 3-D activations
  ``(N, C*H*W, T)`` -> 4-D activations ``(N*T, C, H, W)``
- inverse (`backprop`): 4-D epsilons
  ``(N*T, C, H, W)`` -> 3-D epsilons ``(N, C*H*W, T)``

Row ``n*T + t`` of the 4-D tensor holds the features of example ``n`` at time
step ``t``, so each time step is treated as an independent image by the
convolutional layer.

Design notes
------------
- The preprocessor is immutable and stateless; both transforms are pure.
- The forward pass dispatches explicitly on shape: a mini-batch of one or a
  time series of length one is sliced directly, avoiding the 3-D permute.
- The inverse pass needs the mini-batch size, which is read from the layer
  (`ILayer.input_mini_batch_size`).
- Column-major epsilons are materialized row-major before being reshaped, so
  the reshape reads elements in the same order the forward pass wrote them.
- Outputs may be views of the inputs; neither transform writes into its input.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from typing_extensions import Self

from ...domain._errors import InvalidConfigurationError, ShapeMismatchError
from ...domain._layer import ILayer
from ..tensor._tensor import Tensor
from ._serialization import register_preprocessor


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidConfigurationError(name, value, "must be an integer")
    if not isinstance(value, int):
        try:
            as_int = int(value)
        except (TypeError, ValueError):
            raise InvalidConfigurationError(name, value, "must be an integer") from None
        if as_int != value:
            raise InvalidConfigurationError(name, value, "must be an integer")
        value = as_int
    if value <= 0:
        raise InvalidConfigurationError(name, value, "must be > 0")
    return int(value)


@register_preprocessor()
class RnnToCnnPreProcessor:
    """
    Reshape recurrent activations into convolutional activations and back.

    Parameters
    ----------
    input_height : int
        Height of the images expected by the convolutional layer.
    input_width : int
        Width of the images expected by the convolutional layer.
    num_channels : int
        Channel count (depth / feature maps) of those images.

    Raises
    ------
    InvalidConfigurationError
        If any dimension is not a positive integer.

    Notes
    -----
    ``product = input_height * input_width * num_channels`` must equal the
    feature dimension (axis 1) of the recurrent activations.
    """

    def __init__(self, input_height: int, input_width: int, num_channels: int) -> None:
        self._input_height = _positive_int("input_height", input_height)
        self._input_width = _positive_int("input_width", input_width)
        self._num_channels = _positive_int("num_channels", num_channels)
        self._product = self._input_height * self._input_width * self._num_channels

    def __repr__(self) -> str:
        return (
            f"RnnToCnnPreProcessor(input_height={self._input_height}, "
            f"input_width={self._input_width}, num_channels={self._num_channels})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RnnToCnnPreProcessor):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + self._key())

    def _key(self) -> Tuple[int, int, int]:
        return (self._input_height, self._input_width, self._num_channels)

    @property
    def input_height(self) -> int:
        return self._input_height

    @property
    def input_width(self) -> int:
        return self._input_width

    @property
    def num_channels(self) -> int:
        return self._num_channels

    @property
    def product(self) -> int:
        """
        Flattened feature width ``input_height * input_width * num_channels``.
        """
        return self._product

    # ------------------------------------------------------------------
    # Shape planning
    # ------------------------------------------------------------------
    def output_shape(self, input_shape: Tuple[int, ...]) -> Tuple[int, int, int, int]:
        """
        Return the 4-D shape `pre_process` produces for a 3-D input shape.

        Raises
        ------
        ShapeMismatchError
            If `input_shape` is not ``(N, product, T)``.
        """
        self._check_rnn_shape(tuple(input_shape))
        n, _, t = input_shape
        return (
            int(n) * int(t),
            self._num_channels,
            self._input_height,
            self._input_width,
        )

    def input_shape(
        self, output_shape: Tuple[int, ...], mini_batch_size: int
    ) -> Tuple[int, int, int]:
        """
        Return the 3-D shape `backprop` produces for a 4-D epsilon shape.

        Raises
        ------
        InvalidConfigurationError
            If `mini_batch_size` is not a positive integer.
        ShapeMismatchError
            If `output_shape` is incompatible with this preprocessor.
        """
        batch = _positive_int("input_mini_batch_size", mini_batch_size)
        self._check_cnn_shape(tuple(output_shape), batch)
        return (batch, self._product, int(output_shape[0]) // batch)

    def _check_rnn_shape(self, shape: Tuple[int, ...]) -> None:
        if len(shape) != 3:
            raise ShapeMismatchError(
                "3-D (miniBatch, channels*height*width, timeSeriesLength)",
                shape,
                op="RnnToCnnPreProcessor.pre_process",
            )
        if shape[1] != self._product:
            raise ShapeMismatchError(
                (shape[0], self._product, shape[2]),
                shape,
                op="RnnToCnnPreProcessor.pre_process",
            )

    def _check_cnn_shape(self, shape: Tuple[int, ...], batch: int) -> None:
        op = "RnnToCnnPreProcessor.backprop"
        if len(shape) != 4:
            raise ShapeMismatchError(
                "4-D (miniBatch*timeSeriesLength, channels, height, width)",
                shape,
                op=op,
            )
        per_row = shape[1] * shape[2] * shape[3]
        if per_row != self._product:
            raise ShapeMismatchError(self._product, per_row, op=f"{op} (per-row size)")
        if shape[0] % batch != 0:
            raise ShapeMismatchError(
                f"leading dimension divisible by mini-batch size {batch}",
                shape,
                op=op,
            )

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------
    def pre_process(self, x: Tensor, layer: Optional[ILayer] = None) -> Tensor:
        """
        Reshape 3-D recurrent activations into 4-D convolutional activations.

        Parameters
        ----------
        x : Tensor
            Activations of shape ``(N, C*H*W, T)``.
        layer : Optional[ILayer]
            Receiving layer. Unused by the forward pass.

        Returns
        -------
        Tensor
            Activations of shape ``(N*T, C, H, W)``.

        Raises
        ------
        ShapeMismatchError
            If `x` is not 3-D or its feature dimension differs from `product`.
        """
        shape = x.shape
        self._check_rnn_shape(shape)
        n, features, t = shape

        if n == 1:
            # mini-batch of one: the (features, T) slice read time-major
            in2d = x[0].permute(1, 0)
        elif t == 1:
            # time series length of one: the (N, features) slice
            in2d = x[:, :, 0]
        else:
            # time-major rows, so row n*T + t is x[n, :, t]
            in2d = x.permute(0, 2, 1).reshape((n * t, features), order="c")

        return in2d.reshape(
            (n * t, self._num_channels, self._input_height, self._input_width),
            order="c",
        )

    def backprop(self, output: Tensor, layer: Optional[ILayer]) -> Tensor:
        """
        Reshape 4-D convolutional epsilons into 3-D recurrent epsilons.

        Parameters
        ----------
        output : Tensor
            Epsilons of shape ``(N*T, C, H, W)``.
        layer : ILayer
            Layer supplying the recorded mini-batch size ``N``.

        Returns
        -------
        Tensor
            Epsilons of shape ``(N, C*H*W, T)``.

        Raises
        ------
        InvalidConfigurationError
            If the layer has not recorded a positive mini-batch size.
        ShapeMismatchError
            If `output` is not 4-D, its per-row size differs from `product`,
            or its leading dimension is not divisible by ``N``.
        """
        mini_batch = None if layer is None else layer.input_mini_batch_size
        if mini_batch is None:
            raise InvalidConfigurationError(
                "input_mini_batch_size",
                None,
                "the layer has not recorded a mini-batch size",
            )
        batch = _positive_int("input_mini_batch_size", mini_batch)
        self._check_cnn_shape(output.shape, batch)

        if output.ordering == "f":
            output = output.dup("c")

        rows = output.shape[0]
        reshaped = output.reshape((batch, rows // batch, self._product))
        return reshaped.permute(0, 2, 1)

    # ------------------------------------------------------------------
    # Copy / config
    # ------------------------------------------------------------------
    def clone(self) -> "RnnToCnnPreProcessor":
        """
        Return a new preprocessor with the same dimensions.
        """
        return RnnToCnnPreProcessor(
            self._input_height, self._input_width, self._num_channels
        )

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration dictionary.
        """
        return {
            "input_height": self._input_height,
            "input_width": self._input_width,
            "num_channels": self._num_channels,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Reconstruct a preprocessor from `get_config()` output.
        """
        return cls(
            input_height=cfg["input_height"],
            input_width=cfg["input_width"],
            num_channels=cfg["num_channels"],
        )
