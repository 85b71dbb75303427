# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

import re
from itertools import count
from unittest import TestCase
from unittest.mock import Mock
from unittest.mock import patch as mock_patch

from az_shared.errors import RegistryNameUnavailableError, UserActionRequiredError
from azure_report_provisioning.constants import REGISTRY_NAME_MAX_ATTEMPTS
from azure_report_provisioning.naming import (
    epoch_digits,
    find_available_name,
    fit_length,
    generate_candidates,
    normalize_name,
    random_suffix,
)

VALID_NAME = re.compile(r"^[a-z0-9]+$")


def sequential_suffixes():
    """Deterministic suffix factory: 000001, 000002, ..."""
    counter = count(1)
    return lambda: f"{next(counter):06d}"


class TestNormalizeName(TestCase):
    def test_normalize_name(self):
        test_cases = [
            ("already valid", "researchreportacr", "researchreportacr"),
            ("uppercase", "ResearchReportACR", "researchreportacr"),
            ("punctuation", "research-report_acr.v2!", "researchreportacrv2"),
            ("non ascii", "rëport ácr", "rportcr"),
            ("truncated", "a" * 60, "a" * 40),
            ("nothing valid", "---", ""),
        ]

        for name, base, expected in test_cases:
            with self.subTest(msg=name):
                self.assertEqual(normalize_name(base), expected)

    def test_random_suffix_is_lowercase_hex(self):
        suffix = random_suffix()

        self.assertRegex(suffix, r"^[0-9a-f]{6}$")

    def test_epoch_digits(self):
        self.assertEqual(epoch_digits(5, clock=lambda: 1712345678.9), "45678")
        self.assertEqual(epoch_digits(6, clock=lambda: 1712345678.9), "345678")

    def test_fit_length(self):
        test_cases = [
            ("in bounds", "registry", "registry"),
            ("too long", "r" * 60, "r" * 50),
            ("too short", "ab", "ab12345"),
        ]

        for name, candidate, expected in test_cases:
            with self.subTest(msg=name):
                self.assertEqual(fit_length(candidate, padding=lambda: "12345"), expected)


class TestGenerateCandidates(TestCase):
    def test_first_candidate_is_normalized_base(self):
        candidates = list(generate_candidates("Research-Report-ACR", max_attempts=3, suffix=sequential_suffixes()))

        self.assertEqual(
            candidates, ["researchreportacr", "researchreportacr000001", "researchreportacr000002"]
        )

    def test_candidates_are_valid_for_any_base(self):
        bases = ["researchreportacr", "A", "", "***", "x" * 100, "My Registry 2024!", "Ünïcødé"]

        for base in bases:
            with self.subTest(msg=base):
                candidates = list(generate_candidates(base, max_attempts=REGISTRY_NAME_MAX_ATTEMPTS))
                self.assertEqual(len(candidates), REGISTRY_NAME_MAX_ATTEMPTS)
                for candidate in candidates:
                    self.assertRegex(candidate, VALID_NAME)
                    self.assertGreaterEqual(len(candidate), 5)
                    self.assertLessEqual(len(candidate), 50)

    def test_empty_base_falls_back_to_acr_prefix(self):
        with mock_patch("azure_report_provisioning.naming.epoch_digits", return_value="54321"):
            candidates = list(generate_candidates("!!!", max_attempts=1))

        self.assertEqual(candidates, ["acr54321"])

    def test_long_base_with_suffix_is_truncated(self):
        candidates = list(generate_candidates("b" * 48, max_attempts=2, suffix=lambda: "abcdef"))

        # base is capped at 40 characters before the suffix is added
        self.assertEqual(candidates, ["b" * 40, "b" * 40 + "abcdef"])

    def test_duplicate_suffixes_are_regenerated(self):
        suffixes = iter(["aaaaaa", "aaaaaa", "bbbbbb"])

        candidates = list(generate_candidates("registry", max_attempts=3, suffix=lambda: next(suffixes)))

        self.assertEqual(candidates, ["registry", "registryaaaaaa", "registrybbbbbb"])

    def test_stops_when_no_new_candidate_can_be_generated(self):
        candidates = list(generate_candidates("registry", max_attempts=5, suffix=lambda: "aaaaaa"))

        self.assertEqual(candidates, ["registry", "registryaaaaaa"])


class TestFindAvailableName(TestCase):
    def test_returns_base_unchanged_when_available(self):
        is_available = Mock(return_value=True)

        name = find_available_name("researchreportacr", is_available)

        self.assertEqual(name, "researchreportacr")
        is_available.assert_called_once_with("researchreportacr")

    def test_returns_first_available_candidate(self):
        for rejections in range(0, REGISTRY_NAME_MAX_ATTEMPTS):
            with self.subTest(msg=f"{rejections} rejections"):
                expected = list(
                    generate_candidates("researchreportacr", REGISTRY_NAME_MAX_ATTEMPTS, suffix=sequential_suffixes())
                )
                is_available = Mock(side_effect=[False] * rejections + [True])

                name = find_available_name("researchreportacr", is_available, suffix=sequential_suffixes())

                self.assertEqual(name, expected[rejections])
                self.assertEqual(is_available.call_count, rejections + 1)

    def test_exhausted_attempts(self):
        is_available = Mock(return_value=False)

        with self.assertRaises(RegistryNameUnavailableError) as ctx:
            find_available_name("researchreportacr", is_available)

        self.assertIsInstance(ctx.exception, UserActionRequiredError)
        self.assertEqual(ctx.exception.attempts, REGISTRY_NAME_MAX_ATTEMPTS)
        self.assertIn("Please choose a unique name and rerun", ctx.exception.user_action_message)
        checked = [c.args[0] for c in is_available.call_args_list]
        self.assertEqual(len(checked), REGISTRY_NAME_MAX_ATTEMPTS)
        self.assertEqual(len(set(checked)), REGISTRY_NAME_MAX_ATTEMPTS)

    def test_custom_attempt_budget(self):
        is_available = Mock(return_value=False)

        with self.assertRaises(RegistryNameUnavailableError):
            find_available_name("researchreportacr", is_available, max_attempts=3)

        self.assertEqual(is_available.call_count, 3)
