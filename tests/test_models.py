import unittest

from ref_matching.errors import MatchConfigError, MatchError
from ref_matching.models import MatchRequest, MatchResponse, ReferenceLink
from ref_matching.references import StructuredReference, UnstructuredReference


def _refs(n):
    return [UnstructuredReference(f"citation {i}") for i in range(n)]


class MatchRequestTests(unittest.TestCase):
    def test_defaults(self) -> None:
        req = MatchRequest(_refs(2))
        self.assertEqual(req.candidate_min_score, 0.4)
        self.assertEqual(req.unstructured_min_score, 0.34)
        self.assertEqual(req.structured_min_score, 0.76)
        self.assertEqual(req.unstructured_rows, 20)
        self.assertEqual(req.structured_rows, 100)
        self.assertIsInstance(req.references, tuple)

    def test_invalid_settings_raise(self) -> None:
        bad = [
            {"candidate_min_score": -0.1},
            {"unstructured_min_score": 1.5},
            {"structured_min_score": "high"},
            {"unstructured_rows": 0},
            {"structured_rows": 2.5},
            {"workers": 0},
            {"workers": True},
        ]
        for kwargs in bad:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(MatchConfigError):
                    MatchRequest(_refs(1), **kwargs)

    def test_config_error_is_match_error(self) -> None:
        with self.assertRaises(MatchError):
            MatchRequest(["not a reference"])

    def test_candidate_threshold_may_exceed_one(self) -> None:
        self.assertEqual(MatchRequest(_refs(1), candidate_min_score=2.0).candidate_min_score, 2.0)

    def test_effective_workers_is_clamped(self) -> None:
        self.assertEqual(MatchRequest(_refs(100), workers=50).effective_workers, 30)
        self.assertEqual(MatchRequest(_refs(3), workers=8).effective_workers, 3)
        self.assertEqual(MatchRequest(_refs(10), workers=4).effective_workers, 4)
        self.assertEqual(MatchRequest([], workers=4).effective_workers, 1)


class ResponseJsonTests(unittest.TestCase):
    def test_to_json(self) -> None:
        s = StructuredReference({"author": "Smith", "year": "2001"})
        u = UnstructuredReference("Smith J. 2001.")
        resp = MatchResponse(
            request=MatchRequest([s, u]),
            links=[ReferenceLink(s, "10.1/x", 0.9), ReferenceLink(u, None, 0.0)],
        )
        self.assertEqual(
            resp.to_json(),
            [
                {"reference": {"author": "Smith", "year": "2001"}, "DOI": "10.1/x", "score": 0.9},
                {"reference": "Smith J. 2001.", "DOI": None, "score": 0.0},
            ],
        )
        self.assertEqual(resp.matched, 1)


if __name__ == "__main__":
    unittest.main()
