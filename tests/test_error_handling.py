#!/usr/bin/env python3
"""
Test error handling scenarios for suffix.py.
"""

import io
import logging
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path to import suffix module
sys.path.insert(0, str(Path(__file__).parent.parent))
import suffix  # pylint: disable=wrong-import-position

# Disable logging for tests
suffix.logger.setLevel(logging.CRITICAL)


class TestErrorHandling(unittest.TestCase):
    def setUp(self) -> None:
        # Create a temporary directory
        self.test_dir = tempfile.mkdtemp()

        # Create test files
        self.test_file = os.path.join(self.test_dir, "test.txt")
        self.output_file = os.path.join(self.test_dir, "out.txt")
        with open(self.test_file, "w", encoding="utf-8") as f:
            f.write("Test content\n")

    def tearDown(self) -> None:
        # Clean up the temporary directory
        shutil.rmtree(self.test_dir)

    def test_missing_input_file(self) -> None:
        """A missing input fails the run without creating the output file."""
        missing = os.path.join(self.test_dir, "missing.txt")

        result = suffix.main(
            ["--input", missing, "--output", self.output_file, "-s", "x"]
        )

        self.assertEqual(result, 1)
        self.assertFalse(os.path.exists(self.output_file))

    def test_missing_input_to_stdout(self) -> None:
        """A missing input writes nothing to standard output."""
        missing = os.path.join(self.test_dir, "missing.txt")

        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            result = suffix.main(["--input", missing, "--suffix", "x"])

        self.assertEqual(result, 1)
        self.assertEqual(stdout.getvalue(), "")

    def test_input_is_directory(self) -> None:
        """A directory given as input is an I/O failure."""
        result = suffix.main(["--input", self.test_dir, "--suffix", "x"])
        self.assertEqual(result, 1)

    def test_output_directory_missing(self) -> None:
        """An output path in a missing directory is an I/O failure."""
        output = os.path.join(self.test_dir, "nope", "out.txt")

        result = suffix.main(["-i", self.test_file, "-o", output, "-s", "x"])

        self.assertEqual(result, 1)
        self.assertFalse(os.path.exists(output))

    def test_output_permission_error(self) -> None:
        """A permission error opening the output ends the run with 1."""
        with patch("os.open", side_effect=PermissionError("Permission denied")):
            result = suffix.main(
                ["-i", self.test_file, "-o", self.output_file, "-s", "x"]
            )
        self.assertEqual(result, 1)

    def test_malformed_utf8_input(self) -> None:
        """Undecodable input is an I/O failure, not silently replaced."""
        with open(self.test_file, "wb") as f:
            f.write(b"good\n\xc3\x28 bad\n")

        with patch("sys.stdout", new_callable=io.StringIO):
            result = suffix.main(["-i", self.test_file, "-s", "x"])

        self.assertEqual(result, 1)

    def test_partial_output_left_as_is(self) -> None:
        """Lines written before a failure stay in the output file."""

        def failing_lines():
            yield "first"
            raise OSError("Read error")

        with patch("suffix.transform_lines", return_value=failing_lines()):
            result = suffix.main(
                ["-i", self.test_file, "-o", self.output_file, "-s", "x"]
            )

        self.assertEqual(result, 1)
        with open(self.output_file, "r", encoding="utf-8") as f:
            self.assertEqual(f.read().splitlines(), ["first"])

    def test_broken_pipe(self) -> None:
        """A closed standard output ends the run with 1."""
        with patch("suffix.write_lines", side_effect=BrokenPipeError("Broken pipe")):
            result = suffix.main(["-i", self.test_file, "-s", "x"])
        self.assertEqual(result, 1)

    def test_failure_logged(self) -> None:
        """I/O failures are logged as errors."""
        missing = os.path.join(self.test_dir, "missing.txt")

        with self.assertLogs("LineSuffix", level="ERROR") as logs:
            result = suffix.main(["--input", missing, "--suffix", "x"])

        self.assertEqual(result, 1)
        self.assertIn("missing.txt", "\n".join(logs.output))

    def test_debug_traceback_logging(self) -> None:
        """Verbose runs log the traceback of an I/O failure."""
        missing = os.path.join(self.test_dir, "missing.txt")

        with self.assertLogs("LineSuffix", level="DEBUG") as logs:
            result = suffix.main(["--input", missing, "--suffix", "x", "--verbose"])

        self.assertEqual(result, 1)
        self.assertIn("Traceback", "\n".join(logs.output))

    def test_unexpected_errors_propagate(self) -> None:
        """Errors that are not I/O failures are not swallowed."""
        with patch("suffix.run_pipeline", side_effect=RuntimeError("Test error")):
            with self.assertRaises(RuntimeError):
                suffix.main(["-i", self.test_file, "-s", "x"])


if __name__ == "__main__":
    unittest.main()
