import os
import unittest
from pathlib import Path
from unittest import mock

from streamlit.testing.v1 import AppTest

from sesion import MODE_ENV_VAR

APP = str(Path(__file__).resolve().parent.parent / "app.py")


def _click(at, prefix):
    next(b for b in at.button if b.label.startswith(prefix)).click().run()


class TestcaseApp(unittest.TestCase):
    def test_unknown_mode_in_environment_is_reported(self):
        with mock.patch.dict(os.environ, {MODE_ENV_VAR: "LALR1"}):
            at = AppTest.from_file(APP).run()
        self.assertFalse(at.exception)
        self.assertTrue(any("Modo de tabla desconocido" in e.value for e in at.error))
        self.assertEqual(at.radio[0].value, "SLR1")

    def test_switching_mode_restarts_the_simulation(self):
        with mock.patch.dict(os.environ, {MODE_ENV_VAR: "SLR1"}):
            at = AppTest.from_file(APP).run()
            _click(at, "1)")
            _click(at, "2)")
            _click(at, "Hasta el final")
            self.assertTrue(at.session_state["simulator"].accepted)

            at.radio[0].set_value("LR0").run()
        self.assertFalse(at.exception)
        sim = at.session_state["simulator"]
        self.assertEqual(sim.table.mode.value, "LR0")
        self.assertEqual(sim.cursor, 0)
        self.assertEqual(len(sim.history), 1)


if __name__ == '__main__':
    unittest.main()
