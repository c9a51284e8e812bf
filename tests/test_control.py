import math
import threading
import unittest
import warnings

from fmbeast.control import Controller, clamp_param
from fmbeast.synth.engine import FMSynth
from fmbeast.synth.envelope import Stage
from fmbeast.synth.presets import get_preset, list_presets


class TestClampParam(unittest.TestCase):
    def test_in_range_values_pass_through(self) -> None:
        self.assertEqual(clamp_param("frequency", 440.0), 440.0)
        self.assertEqual(clamp_param("sustain", 0.0), 0.0)

    def test_out_of_range_values_clamp_with_warning(self) -> None:
        with self.assertWarns(UserWarning):
            self.assertEqual(clamp_param("frequency", 5000.0), 2000.0)
        with self.assertWarns(UserWarning):
            self.assertEqual(clamp_param("feedback_amount", 0.9), 0.5)
        with self.assertWarns(UserWarning):
            self.assertEqual(clamp_param("attack", 0.0), 0.001)

    def test_bit_depth_is_integral(self) -> None:
        value = clamp_param("bit_depth", 11.6)
        self.assertEqual(value, 12)
        self.assertIsInstance(value, int)
        with self.assertWarns(UserWarning):
            self.assertEqual(clamp_param("bit_depth", 24), 16)

    def test_hard_sync_is_boolean(self) -> None:
        self.assertIs(clamp_param("hard_sync_enabled", 1), True)
        self.assertIs(clamp_param("hard_sync_enabled", 0), False)

    def test_rejects_unknown_and_non_finite(self) -> None:
        with self.assertRaises(ValueError):
            clamp_param("cutoff", 1.0)
        for bad in (math.nan, math.inf, -math.inf):
            with self.assertRaises(ValueError):
                clamp_param("amplitude", bad)


class TestController(unittest.TestCase):
    def setUp(self) -> None:
        self.synth = FMSynth(sample_rate=44100)
        self.ctl = Controller(self.synth)

    def test_set_operator_param(self) -> None:
        self.ctl.set_operator_param(2, "modulation_ratio", 0.75)
        self.ctl.set_operator_param(0, "hard_sync_enabled", True)
        self.assertEqual(self.synth.operators[2].modulation_ratio, 0.75)
        self.assertTrue(self.synth.operators[0].hard_sync_enabled)

    def test_set_envelope_param(self) -> None:
        self.ctl.set_envelope_param(3, "release", 1.5)
        self.assertEqual(self.synth.operators[3].envelope.release, 1.5)

    def test_rejects_bad_index_and_names(self) -> None:
        with self.assertRaises(ValueError):
            self.ctl.set_operator_param(4, "frequency", 440.0)
        with self.assertRaises(ValueError):
            self.ctl.set_operator_param(-1, "frequency", 440.0)
        with self.assertRaises(ValueError):
            self.ctl.set_operator_param(0, "attack", 0.1)
        with self.assertRaises(ValueError):
            self.ctl.set_envelope_param(0, "frequency", 440.0)

    def test_clamped_value_reaches_engine(self) -> None:
        with self.assertWarns(UserWarning):
            self.ctl.set_operator_param(1, "amplitude", 9.0)
        self.assertEqual(self.synth.operators[1].amplitude, 2.0)

    def test_toggle_note(self) -> None:
        self.assertFalse(self.ctl.note_held)
        self.assertTrue(self.ctl.toggle_note())
        self.assertTrue(all(op.envelope.stage is Stage.ATTACK for op in self.synth.operators))

        self.assertFalse(self.ctl.toggle_note())
        self.assertTrue(all(op.envelope.stage is Stage.RELEASE for op in self.synth.operators))

    def test_toggle_waits_for_engine_lock(self) -> None:
        worker = threading.Thread(target=self.ctl.toggle_note)
        with self.synth.edit():
            worker.start()
            worker.join(timeout=0.2)
            self.assertTrue(worker.is_alive())
            self.assertFalse(self.ctl.note_held)
        worker.join(timeout=10)
        self.assertFalse(worker.is_alive())
        self.assertTrue(self.ctl.note_held)

    def test_concurrent_toggles_stay_in_step_with_envelopes(self) -> None:
        def flip(count):
            for _ in range(count):
                self.ctl.toggle_note()

        threads = [threading.Thread(target=flip, args=(250,)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertFalse(self.ctl.note_held)
        self.assertTrue(all(op.envelope.stage is Stage.RELEASE for op in self.synth.operators))

        self.ctl.toggle_note()
        self.assertTrue(self.ctl.note_held)
        self.assertTrue(all(op.envelope.stage is Stage.ATTACK for op in self.synth.operators))

    def test_factory_presets_load_without_warnings(self) -> None:
        for name in list_presets():
            with self.subTest(name=name):
                with warnings.catch_warnings(record=True) as caught:
                    warnings.simplefilter("always")
                    self.ctl.load_preset(name)
                self.assertEqual(caught, [])
                self.assertEqual(self.ctl.snapshot(), get_preset(name))

    def test_apply_patch_clamps_every_field(self) -> None:
        patch = get_preset("default")
        patch.operators[0].frequency = 9000.0
        patch.operators[3].feedback_amount = 1.0
        patch.operators[2].envelope.release = 10.0

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            self.ctl.apply_patch(patch)

        self.assertEqual(len(caught), 3)
        ops = self.synth.operators
        self.assertEqual(ops[0].frequency, 2000.0)
        self.assertEqual(ops[3].feedback_amount, 0.5)
        self.assertEqual(ops[2].envelope.release, 2.0)

    def test_unknown_preset(self) -> None:
        with self.assertRaises(KeyError):
            self.ctl.load_preset("does_not_exist")


class TestPresets(unittest.TestCase):
    def test_get_preset_returns_independent_copy(self) -> None:
        a = get_preset("default")
        a.operators[0].frequency = 123.0
        self.assertEqual(get_preset("default").operators[0].frequency, 440.0)

    def test_default_patch_matches_startup_values(self) -> None:
        ops = get_preset("default").operators
        self.assertEqual([op.frequency for op in ops], [440.0, 220.0, 110.0, 55.0])
        self.assertEqual([op.amplitude for op in ops], [1.0, 0.8, 0.6, 0.4])
        self.assertEqual([op.feedback_amount for op in ops], [0.0, 0.05, 0.1, 0.15])
        self.assertEqual([op.hard_sync_enabled for op in ops], [False, True, True, True])
        for op in ops:
            env = op.envelope
            self.assertEqual((env.attack, env.decay, env.sustain, env.release), (0.01, 0.05, 0.6, 0.2))


if __name__ == "__main__":
    unittest.main()
