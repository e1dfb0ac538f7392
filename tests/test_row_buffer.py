import pathlib
import sys
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from senselog.core.row_buffer import RowBuffer  # noqa: E402
from senselog.core.schema import SchemaBuilder  # noqa: E402
from senselog.errors import ColumnOutOfRangeError, UnknownColumnError  # noqa: E402


class RowBufferTest(unittest.TestCase):
    def setUp(self):
        self.registry = SchemaBuilder().add_group("Pos", ["x", "y", "z"]).add("Valid").build()
        self.buffer = RowBuffer(self.registry)

    def test_new_buffer_is_all_absent(self):
        for i in range(self.registry.count()):
            self.assertFalse(self.buffer.is_set(i))
            self.assertIsNone(self.buffer.get(i))
        self.assertEqual(self.buffer.set_count(), 0)

    def test_set_then_clear_round_trip(self):
        self.buffer.set_by_index(2, 0.25)
        self.assertTrue(self.buffer.is_set(2))
        self.assertEqual(self.buffer.get(2), 0.25)

        self.buffer.clear()
        for i in range(self.registry.count()):
            self.assertFalse(self.buffer.is_set(i))

    def test_clear_keeps_the_same_storage(self):
        values = self.buffer.values
        presence = self.buffer.presence
        self.buffer.set_by_index(0, 1.0)
        self.buffer.clear()
        self.assertIs(values, self.buffer.values)
        self.assertIs(presence, self.buffer.presence)
        self.assertEqual(len(values), 4)

    def test_zero_and_false_are_present(self):
        self.buffer.set_by_name("Pos_x", 0)
        self.buffer.set_by_name("Valid", False)
        self.assertTrue(self.buffer.is_set(0))
        self.assertTrue(self.buffer.is_set(3))
        self.assertFalse(self.buffer.is_set(1))

    def test_strict_setters_raise(self):
        with self.assertRaises(ColumnOutOfRangeError):
            self.buffer.set_by_index(4, 1.0)
        with self.assertRaises(ColumnOutOfRangeError):
            self.buffer.set_by_index(-1, 1.0)
        with self.assertRaises(UnknownColumnError):
            self.buffer.set_by_name("Pos_w", 1.0)
        with self.assertRaises(KeyError):
            self.buffer.get_by_name("nope")

    def test_try_set_by_name_ignores_unknown(self):
        self.assertFalse(self.buffer.try_set_by_name("Pos_w", 1.0))
        self.assertTrue(self.buffer.try_set_by_name("Pos_y", -2.0))
        self.assertEqual(self.buffer.get_by_name("Pos_y"), -2.0)
        self.assertEqual(self.buffer.set_count(), 1)

    def test_set_many_and_items(self):
        self.buffer.set_many({"Pos_x": 1.5}, Valid=True)
        self.assertEqual(list(self.buffer.items()), [("Pos_x", 1.5), ("Valid", True)])
        with self.assertRaises(UnknownColumnError):
            self.buffer.set_many(Nope=1)


if __name__ == "__main__":
    unittest.main()
