import unittest

from ref_matching.similarity import GenJaccardSimilarity


class GenJaccardSimilarityTests(unittest.TestCase):
    def test_empty_accumulator_is_full_match(self) -> None:
        self.assertEqual(GenJaccardSimilarity().similarity(), 1.0)

    def test_weighted_ratio(self) -> None:
        sim = GenJaccardSimilarity()
        sim.update("year", 1, 1)
        sim.update("title", 1, 0.8)
        sim.update("volume", 1, 0)
        self.assertAlmostEqual(sim.similarity(), 0.6)

    def test_update_overwrites_previous_pair(self) -> None:
        sim = GenJaccardSimilarity()
        sim.update("year", 1, 0)
        sim.update("year", 1, 0.5)
        self.assertEqual(len(sim), 1)
        self.assertEqual(sim.min_weight("year"), 0.5)
        self.assertAlmostEqual(sim.similarity(), 0.5)

    def test_min_weight_absent_signal(self) -> None:
        self.assertIsNone(GenJaccardSimilarity().min_weight("page"))

    def test_order_of_weights_does_not_matter(self) -> None:
        a = GenJaccardSimilarity()
        b = GenJaccardSimilarity()
        a.update("score", 0.5, 1.0)
        b.update("score", 1.0, 0.5)
        self.assertEqual(a.similarity(), b.similarity())
        self.assertEqual(a.min_weight("score"), 0.5)

    def test_penalty_signals_lower_similarity(self) -> None:
        sim = GenJaccardSimilarity()
        sim.update("volume_0", 1, 1)
        sim.update("rest_0", 0, 1)
        sim.update("rest_1", 0, 1)
        self.assertAlmostEqual(sim.similarity(), 1 / 3)


if __name__ == "__main__":
    unittest.main()
