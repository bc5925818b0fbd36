import unittest

from askgate.core.options import (
    ALLOW,
    DENY,
    OPTION_SETS,
    Option,
    OptionModel,
    OptionModelError,
)


class OptionModelTests(unittest.TestCase):
    def test_extended_set_order(self) -> None:
        model = OptionModel.from_set("extended")
        self.assertEqual(model.count(), 3)
        self.assertEqual(model.values(), ["allow", "allow_always", "deny"])
        self.assertEqual(model.deny_index, 2)
        self.assertEqual(model.at(0).label, "Allow")

    def test_basic_set(self) -> None:
        model = OptionModel.from_set("basic")
        self.assertEqual(len(model), 2)
        self.assertEqual([option.value for option in model], ["allow", "deny"])

    def test_at_out_of_range(self) -> None:
        model = OptionModel(OPTION_SETS["basic"])
        with self.assertRaises(IndexError):
            model.at(2)
        with self.assertRaises(IndexError):
            model.at(-1)

    def test_requires_two_options(self) -> None:
        with self.assertRaises(OptionModelError):
            OptionModel([DENY])

    def test_requires_exactly_one_deny(self) -> None:
        with self.assertRaises(OptionModelError):
            OptionModel([ALLOW, Option("Allow too", "", "", "allow_too")])
        with self.assertRaises(OptionModelError):
            OptionModel([ALLOW, DENY, DENY])

    def test_unknown_set(self) -> None:
        with self.assertRaises(OptionModelError):
            OptionModel.from_set("everything")


if __name__ == "__main__":
    unittest.main()
