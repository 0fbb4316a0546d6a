import unittest
import numpy as np

from layerflow.domain._errors import ShapeMismatchError
from layerflow.infrastructure._tensor import Tensor


class TestTensorOrdering(unittest.TestCase):
    def test_new_tensor_is_zero_and_c_ordered(self):
        t = Tensor((2, 3))
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.ordering, "c")
        self.assertEqual(t.dtype, np.float32)
        np.testing.assert_array_equal(t.to_numpy(), np.zeros((2, 3)))

    def test_f_ordered_allocation(self):
        t = Tensor((2, 3), order="f")
        self.assertEqual(t.ordering, "f")

    def test_from_numpy_preserves_fortran_order(self):
        a = np.asfortranarray(np.arange(6, dtype=np.float64).reshape(2, 3))
        t = Tensor.from_numpy(a)
        self.assertEqual(t.ordering, "f")
        self.assertEqual(t.dtype, np.float64)
        np.testing.assert_array_equal(t.to_numpy(), a)

    def test_from_numpy_copies(self):
        a = np.ones((2, 2), dtype=np.float32)
        t = Tensor.from_numpy(a)
        a[0, 0] = 5.0
        self.assertEqual(float(t.to_numpy()[0, 0]), 1.0)

    def test_dup_changes_layout_not_values(self):
        a = np.arange(12, dtype=np.float32).reshape(3, 4)
        t = Tensor.from_numpy(np.asfortranarray(a))
        c = t.dup("c")
        self.assertEqual(c.ordering, "c")
        self.assertEqual(c.shape, (3, 4))
        np.testing.assert_array_equal(c.to_numpy(), a)
        self.assertFalse(np.shares_memory(c.data, t.data))

    def test_invalid_order_raises(self):
        with self.assertRaises(ValueError):
            Tensor((2,), order="x")


class TestTensorViews(unittest.TestCase):
    def test_reshape_follows_own_ordering(self):
        a = np.arange(6, dtype=np.float32).reshape(2, 3)
        t = Tensor.from_numpy(np.asfortranarray(a))
        np.testing.assert_array_equal(
            t.reshape((3, 2)).to_numpy(), a.reshape((3, 2), order="F")
        )
        np.testing.assert_array_equal(
            t.reshape((3, 2), order="c").to_numpy(), a.reshape((3, 2))
        )
        np.testing.assert_array_equal(
            t.dup("c").reshape((3, 2)).to_numpy(), a.reshape((3, 2))
        )

    def test_reshape_element_count_mismatch_raises(self):
        t = Tensor((2, 3))
        with self.assertRaises(ShapeMismatchError):
            t.reshape((4, 2))

    def test_reshape_infers_minus_one(self):
        t = Tensor((2, 3, 4))
        self.assertEqual(t.reshape((6, -1)).shape, (6, 4))

    def test_permute_is_a_view(self):
        t = Tensor.from_numpy(np.arange(24, dtype=np.float32).reshape(2, 3, 4))
        p = t.permute(0, 2, 1)
        self.assertEqual(p.shape, (2, 4, 3))
        self.assertTrue(np.shares_memory(p.data, t.data))
        np.testing.assert_array_equal(
            p.to_numpy(), t.to_numpy().transpose(0, 2, 1)
        )

    def test_permute_rejects_non_permutation(self):
        t = Tensor((2, 3))
        with self.assertRaises(ValueError):
            t.permute(0, 0)

    def test_getitem_slices_alias_storage(self):
        t = Tensor((2, 3, 4))
        s = t[0]
        self.assertEqual(s.shape, (3, 4))
        s.fill(7.0)
        self.assertTrue(np.all(t.to_numpy()[0] == 7.0))
        self.assertTrue(np.all(t.to_numpy()[1] == 0.0))

    def test_getitem_rejects_fancy_indexing(self):
        t = Tensor((3,))
        with self.assertRaises(TypeError):
            t[[0, 1]]


class TestTensorArithmetic(unittest.TestCase):
    def test_elementwise_ops(self):
        a = np.array([1.0, 4.0, 9.0], dtype=np.float64)
        b = np.array([2.0, -1.0, 3.0], dtype=np.float64)
        ta, tb = Tensor.from_numpy(a), Tensor.from_numpy(b)

        np.testing.assert_allclose((ta + tb).to_numpy(), a + b)
        np.testing.assert_allclose((ta - tb).to_numpy(), a - b)
        np.testing.assert_allclose((ta * tb).to_numpy(), a * b)
        np.testing.assert_allclose((ta / tb).to_numpy(), a / b)
        np.testing.assert_allclose((2.0 * ta).to_numpy(), 2.0 * a)
        np.testing.assert_allclose((1.0 - ta).to_numpy(), 1.0 - a)
        np.testing.assert_allclose((1.0 / ta).to_numpy(), 1.0 / a)
        np.testing.assert_allclose((-ta).to_numpy(), -a)
        np.testing.assert_allclose(ta.sqrt().to_numpy(), np.sqrt(a))
        np.testing.assert_allclose(tb.abs().to_numpy(), np.abs(b))
        np.testing.assert_allclose(tb.sign().to_numpy(), np.sign(b))
        self.assertAlmostEqual(ta.sum(), 14.0)
        self.assertAlmostEqual(tb.norm2(), float(np.sqrt(14.0)))

    def test_binary_op_shape_mismatch_raises(self):
        with self.assertRaises(ShapeMismatchError):
            _ = Tensor((2, 3)) + Tensor((3, 2))

    def test_unsupported_operand_raises(self):
        with self.assertRaises(TypeError):
            _ = Tensor((2,)) + "x"

    def test_copy_from_and_copy_from_numpy(self):
        t = Tensor((2,))
        t.copy_from_numpy([1.0, 2.0])
        u = Tensor((2,))
        u.copy_from(t)
        np.testing.assert_array_equal(u.to_numpy(), [1.0, 2.0])
        with self.assertRaises(ShapeMismatchError):
            u.copy_from(Tensor((3,)))
        with self.assertRaises(ShapeMismatchError):
            t.copy_from_numpy([1.0, 2.0, 3.0])

    def test_clone_is_independent(self):
        t = Tensor.from_numpy(np.ones((2, 2), dtype=np.float32))
        c = t.clone()
        c.fill(3.0)
        self.assertTrue(np.all(t.to_numpy() == 1.0))

    def test_item(self):
        t = Tensor.from_numpy(np.array([[2.5]], dtype=np.float32))
        self.assertEqual(t.item(), 2.5)
        with self.assertRaises(ShapeMismatchError):
            Tensor((2,)).item()


if __name__ == "__main__":
    unittest.main()
