import math
import unittest

from fmbeast.synth.envelope import Envelope, Stage
from fmbeast.processing.effects import crush
from fmbeast.synth.operator import TWO_PI, Operator


DT = 1.0 / 44100


def _held_envelope() -> Envelope:
    env = Envelope(attack=0.01, decay=0.05, sustain=1.0, release=0.2)
    env.stage = Stage.SUSTAIN
    env.level = 1.0
    env.active = True
    return env


class TestOperatorOscillator(unittest.TestCase):
    def test_sine_period_has_zero_mean_and_headroom(self) -> None:
        op = Operator(
            frequency=440.0,
            amplitude=1.0,
            envelope=_held_envelope(),
            modulation_ratio=1.0,
            feedback_amount=0.0,
            hard_sync_enabled=False,
            bit_depth=16,
        )
        samples = [op.sample(DT, 0.0) for _ in range(100)]

        self.assertAlmostEqual(sum(samples) / len(samples), 0.0, delta=0.01)
        self.assertLessEqual(max(abs(s) for s in samples), 0.9)
        self.assertGreater(max(samples), 0.85)
        self.assertLess(min(samples), -0.85)

    def test_phase_increment_uses_ratio_and_linear_fm(self) -> None:
        op = Operator(frequency=200.0, amplitude=1.0, envelope=_held_envelope(), modulation_ratio=1.5)
        op.sample(DT, 0.25)
        expected = TWO_PI * (200.0 * 1.5 + 0.25 * 200.0) * DT
        self.assertAlmostEqual(op.phase, expected)

    def test_feedback_reads_raw_phase(self) -> None:
        op = Operator(frequency=100.0, amplitude=1.0, envelope=_held_envelope(), feedback_amount=0.5)
        op.phase = 1.0
        op.sample(DT, 0.0)
        self.assertAlmostEqual(op.phase, 1.0 + TWO_PI * 100.0 * DT + 0.5)

    def test_hard_sync_keeps_phase_bounded(self) -> None:
        op = Operator(frequency=880.0, amplitude=1.0, envelope=_held_envelope(),
                      feedback_amount=0.3, hard_sync_enabled=True)
        for _ in range(5000):
            op.sample(DT, 0.0)
            self.assertGreaterEqual(op.phase, 0.0)
            self.assertLess(op.phase, TWO_PI)

    def test_unsynced_phase_accumulates(self) -> None:
        op = Operator(frequency=440.0, amplitude=1.0, envelope=_held_envelope())
        for _ in range(1000):
            op.sample(DT, 0.0)
        self.assertAlmostEqual(op.phase, 1000 * TWO_PI * 440.0 * DT, places=6)
        self.assertGreater(op.phase, TWO_PI)


class TestOperatorOutput(unittest.TestCase):
    def test_output_is_quantized_to_bit_depth(self) -> None:
        for bits in (8, 12, 16):
            with self.subTest(bits=bits):
                op = Operator(frequency=330.0, amplitude=0.7, envelope=_held_envelope(), bit_depth=bits)
                step = 2.0 ** -bits
                for _ in range(200):
                    out = op.sample(DT, 0.0)
                    self.assertEqual(out / step, round(out / step))
                    self.assertLessEqual(abs(out), 1.0)

    def test_loud_operator_is_clamped_to_headroom(self) -> None:
        op = Operator(frequency=440.0, amplitude=2.0, envelope=_held_envelope())
        samples = [op.sample(DT, 0.0) for _ in range(200)]
        self.assertLessEqual(max(abs(s) for s in samples), 0.9)
        self.assertAlmostEqual(max(samples), 0.9, delta=2.0 ** -16)

    def test_idle_envelope_is_silent(self) -> None:
        op = Operator(frequency=440.0, amplitude=1.0, envelope=Envelope(0.01, 0.05, 0.6, 0.2))
        self.assertTrue(all(op.sample(DT, 0.3) == 0.0 for _ in range(100)))

    def test_envelope_advances_once_per_sample(self) -> None:
        op = Operator(frequency=440.0, amplitude=1.0, envelope=Envelope(0.01, 0.05, 0.6, 0.2))
        op.note_on()
        for _ in range(9):
            op.sample(0.001, 0.0)
        self.assertIs(op.envelope.stage, Stage.ATTACK)
        op.sample(0.001, 0.0)
        self.assertIs(op.envelope.stage, Stage.DECAY)

    def test_non_finite_phase_yields_nan_instead_of_raising(self) -> None:
        for sync in (False, True):
            with self.subTest(sync=sync):
                op = Operator(frequency=440.0, amplitude=1.0, envelope=_held_envelope(),
                              hard_sync_enabled=sync)
                op.phase = math.inf
                self.assertTrue(math.isnan(op.sample(DT, 0.0)))

    def test_output_matches_module_crush(self) -> None:
        op = Operator(frequency=330.0, amplitude=0.8, envelope=_held_envelope(), bit_depth=6)
        self.assertFalse(hasattr(op, "crush"))
        for _ in range(50):
            out = op.sample(DT, 0.0)
            self.assertEqual(crush(out, 6), out)

    def test_reset_zeroes_phase_and_envelope(self) -> None:
        op = Operator(frequency=440.0, amplitude=1.0, envelope=_held_envelope())
        op.sample(DT, 0.0)
        op.reset()
        self.assertEqual(op.phase, 0.0)
        self.assertFalse(op.envelope.active)


if __name__ == "__main__":
    unittest.main()
