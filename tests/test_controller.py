import itertools
import unittest

from askgate.core.controller import (
    Confirm,
    Escape,
    MoveDown,
    MoveUp,
    Phase,
    PointerSelect,
    SelectionController,
    SelectionState,
    Submit,
    TextChanged,
    format_reason_verdict,
    reduce,
)
from askgate.core.options import OptionModel
from askgate.core.request import Request


class ControllerTestCase(unittest.TestCase):
    option_set = "extended"

    def setUp(self) -> None:
        self.verdicts: list[str] = []
        self.options = OptionModel.from_set(self.option_set)
        self.controller = SelectionController(
            Request(), self.options, on_verdict=self.verdicts.append
        )

    def send(self, *events) -> SelectionState:  # type: ignore[no-untyped-def]
        for event in events:
            self.controller.handle(event)
        return self.controller.state


class NavigationTests(ControllerTestCase):
    def test_initial_state(self) -> None:
        state = self.controller.state
        self.assertEqual(state.current_index, 0)
        self.assertIs(state.phase, Phase.BROWSING)
        self.assertEqual(state.reason_text, "")
        self.assertIsNone(state.verdict)

    def test_moves_clamp_without_wrapping(self) -> None:
        self.assertEqual(self.send(MoveUp()).current_index, 0)
        self.assertEqual(self.send(MoveDown(), MoveDown(), MoveDown()).current_index, 2)
        self.assertEqual(self.send(MoveUp()).current_index, 1)

    def test_every_short_move_sequence_stays_in_range(self) -> None:
        last = self.options.count() - 1
        for length in range(1, 6):
            for moves in itertools.product((MoveUp, MoveDown), repeat=length):
                state = SelectionState()
                for move in moves:
                    state = reduce(state, move(), self.options)
                    self.assertGreaterEqual(state.current_index, 0)
                    self.assertLessEqual(state.current_index, last)

    def test_no_op_move_requests_no_render(self) -> None:
        transition = self.controller.handle(MoveUp())
        self.assertFalse(transition.render)
        transition = self.controller.handle(MoveDown())
        self.assertTrue(transition.render)

    def test_reason_events_ignored_while_browsing(self) -> None:
        transition = self.controller.handle(TextChanged("hello"))
        self.assertFalse(transition.render)
        self.assertEqual(self.controller.state.reason_text, "")
        self.send(Submit())
        self.assertIs(self.controller.state.phase, Phase.BROWSING)
        self.assertEqual(self.verdicts, [])


class ConfirmTests(ControllerTestCase):
    def test_confirm_allow(self) -> None:
        state = self.send(Confirm())
        self.assertIs(state.phase, Phase.TERMINAL)
        self.assertEqual(state.verdict, "allow")
        self.assertEqual(self.verdicts, ["allow"])

    def test_confirm_allow_always(self) -> None:
        self.send(MoveDown(), Confirm())
        self.assertEqual(self.verdicts, ["allow_always"])

    def test_terminal_latch_ignores_later_events(self) -> None:
        self.send(Confirm())
        for event in (MoveDown(), Confirm(), Escape(), PointerSelect(2), Submit(), TextChanged("x")):
            transition = self.controller.handle(event)
            self.assertFalse(transition.render)
        self.assertEqual(self.controller.state.verdict, "allow")
        self.assertEqual(self.verdicts, ["allow"])

    def test_confirm_deny_enters_reason_capture(self) -> None:
        state = self.send(MoveDown(), MoveDown(), Confirm())
        self.assertIs(state.phase, Phase.AWAITING_REASON)
        self.assertIsNone(state.verdict)
        self.assertEqual(self.verdicts, [])

    def test_pointer_select_confirms_row(self) -> None:
        state = self.send(PointerSelect(1))
        self.assertEqual(state.current_index, 1)
        self.assertEqual(self.verdicts, ["allow_always"])

    def test_pointer_select_deny_row(self) -> None:
        state = self.send(PointerSelect(2))
        self.assertIs(state.phase, Phase.AWAITING_REASON)
        self.assertEqual(state.current_index, 2)

    def test_pointer_select_out_of_range_ignored(self) -> None:
        for row in (-1, 3, 99):
            transition = self.controller.handle(PointerSelect(row))
            self.assertFalse(transition.render)
        self.assertIs(self.controller.state.phase, Phase.BROWSING)
        self.assertEqual(self.verdicts, [])


class EscapeTests(ControllerTestCase):
    def test_escape_on_allow_denies(self) -> None:
        state = self.send(Escape())
        self.assertEqual(state.current_index, 0)
        self.assertEqual(state.verdict, "deny")
        self.assertEqual(self.verdicts, ["deny"])

    def test_escape_from_reason_discards_text(self) -> None:
        self.send(PointerSelect(2), TextChanged("not sure"), Escape())
        self.assertEqual(self.verdicts, ["deny"])


class ReasonTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.send(PointerSelect(self.options.deny_index))

    def test_empty_reason_is_plain_deny(self) -> None:
        self.send(Submit())
        self.assertEqual(self.verdicts, ["deny"])

    def test_whitespace_reason_is_plain_deny(self) -> None:
        self.send(TextChanged("   "), Submit())
        self.assertEqual(self.verdicts, ["deny"])

    def test_reason_is_trimmed(self) -> None:
        self.send(TextChanged("  flaky"), TextChanged("  flaky test  "), Submit())
        self.assertEqual(self.verdicts, ["deny:flaky test"])

    def test_navigation_ignored_during_reason(self) -> None:
        state = self.send(MoveUp(), Confirm())
        self.assertIs(state.phase, Phase.AWAITING_REASON)
        self.assertEqual(state.current_index, self.options.deny_index)

    def test_double_submit_emits_once(self) -> None:
        self.send(TextChanged("nope"), Submit(), Submit(), Escape())
        self.assertEqual(self.verdicts, ["deny:nope"])


class BasicOptionSetTests(ControllerTestCase):
    option_set = "basic"

    def test_down_reaches_deny(self) -> None:
        state = self.send(MoveDown(), MoveDown(), MoveDown())
        self.assertEqual(state.current_index, 1)
        self.send(Confirm(), TextChanged("risky"), Submit())
        self.assertEqual(self.verdicts, ["deny:risky"])


class ReasonFormatTests(unittest.TestCase):
    def test_format(self) -> None:
        self.assertEqual(format_reason_verdict(""), "deny")
        self.assertEqual(format_reason_verdict("  why  "), "deny:why")
        self.assertEqual(format_reason_verdict("a: b"), "deny:a: b")

    def test_line_breaks_collapse(self) -> None:
        self.assertEqual(format_reason_verdict("line one\r\n  line two\n"), "deny:line one line two")


if __name__ == "__main__":
    unittest.main()
