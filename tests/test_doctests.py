import doctest
import unittest

import fmbeast
import fmbeast.control
import fmbeast.processing.effects
import fmbeast.processing.filters
import fmbeast.sink
import fmbeast.synth.engine
import fmbeast.synth.envelope


MODULES = [
    fmbeast,
    fmbeast.control,
    fmbeast.processing.effects,
    fmbeast.processing.filters,
    fmbeast.sink,
    fmbeast.synth.engine,
    fmbeast.synth.envelope,
]


class TestDocExamples(unittest.TestCase):
    def test_module_examples(self) -> None:
        for module in MODULES:
            with self.subTest(module=module.__name__):
                result = doctest.testmod(module)
                self.assertEqual(result.failed, 0)
                self.assertGreater(result.attempted, 0)


if __name__ == "__main__":
    unittest.main()
