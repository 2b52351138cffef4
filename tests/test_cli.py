import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from ref_matching import cli

from sample_works import CERMINE, CERMINE_FIELDS, CERMINE_FULL, WRONG_VENUE, work


class _FakeClient:
    instances = []

    def __init__(self, base_url, **kwargs) -> None:
        self.base_url = base_url
        self.kwargs = kwargs
        self.closed = False
        _FakeClient.instances.append(self)

    def search(self, query, rows, headers=None):
        return [work(CERMINE)]

    def close(self) -> None:
        self.closed = True


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        _FakeClient.instances = []
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.missing = os.path.join(self.tmp.name, "missing")

    def _run(self, *args):
        argv = ["--key-file", self.missing, "--journals", self.missing, *args]
        out, err = io.StringIO(), io.StringIO()
        with patch.object(cli, "CrossrefSearchClient", _FakeClient), patch.dict(os.environ, {}, clear=True):
            with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
                code = cli.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_string_input_prints_json(self) -> None:
        data = json.dumps([CERMINE_FULL, CERMINE_FIELDS, WRONG_VENUE])
        code, out, _ = self._run("-it", "string", "-i", data, "--mailto", "me@example.org", "-w", "2")

        self.assertEqual(code, 0)
        results = json.loads(out)
        self.assertEqual([r["DOI"] for r in results], [CERMINE["DOI"], CERMINE["DOI"], None])
        self.assertEqual(results[0]["reference"], CERMINE_FULL)
        self.assertEqual(results[1]["reference"], CERMINE_FIELDS)
        self.assertEqual(results[2]["score"], 0.0)

        client = _FakeClient.instances[0]
        self.assertTrue(client.closed)
        self.assertEqual(client.kwargs["mailto"], "me@example.org")
        self.assertEqual(client.kwargs["headers"], {"Mailto": "me@example.org"})

    def test_file_input_and_output_file(self) -> None:
        src = os.path.join(self.tmp.name, "refs.txt")
        with open(src, "w", encoding="utf-8") as fh:
            fh.write(CERMINE_FULL + "\n" + json.dumps(CERMINE_FIELDS) + "\n")
        dst = os.path.join(self.tmp.name, "out", "links.json")

        code, out, _ = self._run("-it", "file", "-i", src, "-o", dst, "-st", "0.8")

        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        with open(dst, encoding="utf-8") as fh:
            results = json.load(fh)
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0]["DOI"], CERMINE["DOI"])
        self.assertAlmostEqual(results[1]["score"], 0.828, places=3)

    def test_strict_structured_threshold(self) -> None:
        code, out, _ = self._run("-it", "string", "-i", json.dumps([CERMINE_FIELDS]), "-st", "0.9")
        self.assertEqual(code, 0)
        self.assertIsNone(json.loads(out)[0]["DOI"])

    def test_invalid_threshold_exits_with_error(self) -> None:
        code, out, err = self._run("-it", "string", "-i", CERMINE_FULL, "-ut", "1.5")
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("unstructured_min_score", err)
        self.assertEqual(_FakeClient.instances, [])

    def test_missing_input_file_exits_with_error(self) -> None:
        code, _, err = self._run("-it", "file", "-i", self.missing)
        self.assertEqual(code, 2)
        self.assertIn("does not exist", err)

    def test_undecodable_input_file_exits_with_error(self) -> None:
        src = os.path.join(self.tmp.name, "refs.txt")
        with open(src, "wb") as fh:
            fh.write(b"Tkaczyk D. \xff\xfe IJDAR 18 (2015) 317.\n")
        code, out, err = self._run("-it", "file", "-i", src)
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("Unable to read input file", err)


if __name__ == "__main__":
    unittest.main()
