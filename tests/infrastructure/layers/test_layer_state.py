import math
import unittest
import numpy as np

from layerflow.domain._errors import ShapeMismatchError
from layerflow.infrastructure._preprocessors import RnnToCnnPreProcessor
from layerflow.infrastructure._tensor import Tensor
from layerflow.infrastructure._updaters import RmsPropUpdater
from layerflow.infrastructure.config._layer_conf import LayerConf
from layerflow.infrastructure.layers._layer_state import LayerState


def tensor_from_np(arr) -> Tensor:
    return Tensor.from_numpy(np.asarray(arr, dtype=np.float64))


class TestLayerState(unittest.TestCase):
    def test_default_owns_rmsprop_updater(self):
        layer = LayerState()
        self.assertIsInstance(layer.updater, RmsPropUpdater)
        self.assertIsNone(layer.input_mini_batch_size)

    def test_set_input_records_mini_batch_size(self):
        layer = LayerState()
        layer.set_input(Tensor((6, 4, 3)))
        self.assertEqual(layer.input_mini_batch_size, 6)
        with self.assertRaises(ShapeMismatchError):
            layer.set_input(Tensor(()))

    def test_get_param_unknown_raises_key_error(self):
        with self.assertRaises(KeyError):
            LayerState().get_param("W")

    def test_apply_gradients_moves_parameters(self):
        layer = LayerState(
            conf=LayerConf(learning_rate=0.1, rms_decay=0.9),
            params={"W": tensor_from_np([1.0, -1.0])},
        )
        layer.apply_gradients({"W": tensor_from_np([1.0, 1.0])})

        step = 0.1 / (math.sqrt(0.1) + 1e-8)
        np.testing.assert_allclose(
            layer.get_param("W").to_numpy(), [1.0 - step, -1.0 - step], rtol=1e-12
        )

    def test_apply_gradients_for_unknown_parameter_raises_before_update(self):
        layer = LayerState(params={"W": tensor_from_np([1.0])})
        with self.assertRaises(KeyError):
            layer.apply_gradients({"b": tensor_from_np([1.0])})
        self.assertEqual(len(layer.updater), 0)

    def test_apply_gradients_shape_mismatch_leaves_state_untouched(self):
        layer = LayerState(
            params={"W": tensor_from_np([1.0, 2.0]), "b": tensor_from_np([1.0])}
        )
        layer.apply_gradients({"W": tensor_from_np([1.0, 1.0])})
        w_before = layer.get_param("W").to_numpy()
        w_memory_before = layer.updater.get_or_create(
            "W", tensor_from_np([0.0, 0.0]), layer
        ).memory.to_numpy()

        with self.assertRaises(ShapeMismatchError):
            layer.apply_gradients(
                {"W": tensor_from_np([1.0, 1.0]), "b": tensor_from_np([1.0, 1.0, 1.0])}
            )

        self.assertNotIn("b", layer.updater)
        self.assertEqual(layer.updater.variables(), ["W"])
        np.testing.assert_array_equal(layer.get_param("W").to_numpy(), w_before)
        np.testing.assert_array_equal(
            layer.updater.get_or_create("W", tensor_from_np([0.0, 0.0]), layer)
            .memory.to_numpy(),
            w_memory_before,
        )
        np.testing.assert_array_equal(layer.get_param("b").to_numpy(), [1.0])

    def test_reinitialize_clears_optimizer_state(self):
        layer = LayerState(params={"W": tensor_from_np([1.0])})
        layer.apply_gradients({"W": tensor_from_np([1.0])})
        self.assertIn("W", layer.updater)
        layer.reinitialize()
        self.assertEqual(len(layer.updater), 0)

    def test_clone_has_independent_state(self):
        layer = LayerState(params={"W": tensor_from_np([1.0, 2.0])})
        layer.apply_gradients({"W": tensor_from_np([1.0, 1.0])})

        twin = layer.clone()
        self.assertIsNot(twin.updater, layer.updater)
        self.assertEqual(len(twin.updater), 0)
        self.assertIsNot(twin.conf, layer.conf)
        self.assertEqual(twin.conf, layer.conf)

        twin.get_param("W").fill(0.0)
        self.assertFalse(np.allclose(layer.get_param("W").to_numpy(), 0.0))


class TestRnnCnnChain(unittest.TestCase):
    def test_sequence_to_spatial_training_step(self):
        """
        RNN activations -> preprocessor -> (stand-in) CNN error -> preprocessor
        backprop -> RNN-side gradient consumed by the RNN layer's updater.
        """
        rng = np.random.default_rng(0)
        b, t, c, h, w = 3, 4, 2, 2, 2
        pre = RnnToCnnPreProcessor(h, w, c)

        cnn_layer = LayerState()
        x = tensor_from_np(rng.standard_normal((b, c * h * w, t)))
        cnn_layer.set_input(x)
        acts = pre.pre_process(x, cnn_layer)
        self.assertEqual(acts.shape, (b * t, c, h, w))

        eps_cnn = 2.0 * acts
        eps_rnn = pre.backprop(eps_cnn, cnn_layer)
        self.assertEqual(eps_rnn.shape, x.shape)
        np.testing.assert_allclose(eps_rnn.to_numpy(), 2.0 * x.to_numpy())

        rnn_layer = LayerState(
            conf=LayerConf(learning_rate=0.01, rms_decay=0.9),
            params={"W": tensor_from_np(np.zeros(x.shape))},
        )
        steps = rnn_layer.apply_gradients({"W": eps_rnn})
        self.assertEqual(steps["W"].shape, x.shape)
        self.assertTrue(np.all(np.isfinite(rnn_layer.get_param("W").to_numpy())))


if __name__ == "__main__":
    unittest.main()
