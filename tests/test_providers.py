# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from unittest.mock import Mock, call

from az_shared.errors import ResourceProviderRegistrationError, UserActionRequiredError
from azure_report_provisioning.polling import poll_until
from azure_report_provisioning.providers import (
    RegistrationResult,
    ensure_providers_registered,
    wait_for_provider_registration,
)

from tests.provisioning_test_case import ProvisioningTestCase
from tests.test_data import SUBSCRIPTION_ID, FakeClock

NAMESPACE = "Microsoft.ContainerRegistry"


class TestPollUntil(ProvisioningTestCase):
    def test_poll_until_done_immediately(self):
        clock = FakeClock()
        fetch = Mock(return_value="ready")

        result = poll_until(fetch, lambda v: v == "ready", timeout=30, interval=5, sleep=clock.sleep, clock=clock)

        self.assertTrue(result.done)
        self.assertEqual(result.checks, 1)
        self.assertEqual(clock.sleeps, [])

    def test_poll_until_timeout(self):
        clock = FakeClock()
        fetch = Mock(return_value="pending")

        result = poll_until(fetch, lambda v: v == "ready", timeout=30, interval=5, sleep=clock.sleep, clock=clock)

        self.assertFalse(result.done)
        self.assertEqual(result.last_value, "pending")
        self.assertEqual(fetch.call_count, 6)
        self.assertLessEqual(clock.now, 30 + 5)

    def test_poll_until_reports_every_check(self):
        clock = FakeClock()
        seen = []

        poll_until(
            Mock(side_effect=["a", "b", "done"]),
            lambda v: v == "done",
            timeout=30,
            interval=5,
            on_check=seen.append,
            sleep=clock.sleep,
            clock=clock,
        )

        self.assertEqual(seen, ["a", "b", "done"])


class TestWaitForProviderRegistration(ProvisioningTestCase):
    def setUp(self) -> None:
        self.log_mock = self.patch("azure_report_provisioning.providers.log")
        self.clock = FakeClock()

    def wait(self, get_state, register, timeout=300, interval=5) -> RegistrationResult:
        return wait_for_provider_registration(
            NAMESPACE, get_state, register, timeout=timeout, interval=interval, sleep=self.clock.sleep, clock=self.clock
        )

    def test_already_registered_skips_registration(self):
        """Test a registered provider is not re-registered"""
        register = Mock()

        result = self.wait(Mock(return_value="Registered"), register)

        self.assertEqual(result, RegistrationResult(NAMESPACE, True, "Registered"))
        register.assert_not_called()
        self.assertEqual(self.clock.sleeps, [])
        self.log_mock.info.assert_called_with(f"Provider {NAMESPACE} already registered.")

    def test_registers_and_polls_until_registered(self):
        """Test registration is requested and polled until registered"""
        register = Mock()
        get_state = Mock(side_effect=["NotRegistered", "Registering", "Registering", "Registered"])

        result = self.wait(get_state, register)

        self.assertTrue(result.registered)
        register.assert_called_once_with()
        self.assertEqual(get_state.call_count, 4)
        self.assertEqual(self.clock.sleeps, [5, 5])

    def test_registration_request_failure_is_not_fatal(self):
        """Test a failed registration request still polls the state"""
        register = Mock(side_effect=RuntimeError("Command failed: az provider register"))
        get_state = Mock(side_effect=["NotRegistered", "Registered"])

        result = self.wait(get_state, register)

        self.assertTrue(result.registered)
        self.log_mock.warning.assert_called_once()

    def test_timeout_reports_last_state(self):
        """Test the poller gives up after the timeout with the last observed state"""
        get_state = Mock(side_effect=["NotRegistered"] + ["Registering"] * 100)

        result = self.wait(get_state, Mock(), timeout=20, interval=5)

        self.assertEqual(result, RegistrationResult(NAMESPACE, False, "Registering"))
        self.assertLessEqual(self.clock.now, 20 + 5)
        self.log_mock.error.assert_called_once_with(
            f"Timed out waiting for provider {NAMESPACE} to register. Current state: Registering"
        )

    def test_terminates_within_timeout_plus_interval(self):
        """Test termination bound for a range of timeouts and intervals"""
        for timeout, interval in [(0, 5), (1, 5), (5, 5), (7, 3), (300, 5), (10, 30)]:
            with self.subTest(timeout=timeout, interval=interval):
                clock = FakeClock()
                result = wait_for_provider_registration(
                    NAMESPACE,
                    Mock(return_value="NotRegistered"),
                    Mock(),
                    timeout=timeout,
                    interval=interval,
                    sleep=clock.sleep,
                    clock=clock,
                )

                self.assertFalse(result.registered)
                self.assertLessEqual(clock.now, timeout + interval)


class TestEnsureProvidersRegistered(ProvisioningTestCase):
    def setUp(self) -> None:
        self.patch("azure_report_provisioning.providers.log")
        self.clock = FakeClock()
        self.client = self.fake_az_client()

    def test_all_registered(self):
        """Test every namespace is checked against the subscription"""
        results = ensure_providers_registered(
            self.client, ["Microsoft.Storage", NAMESPACE], SUBSCRIPTION_ID, sleep=self.clock.sleep, clock=self.clock
        )

        self.assertTrue(all(r.registered for r in results))
        self.client.get_provider_state.assert_has_calls(
            [call("Microsoft.Storage", SUBSCRIPTION_ID), call(NAMESPACE, SUBSCRIPTION_ID)]
        )
        self.client.register_provider.assert_not_called()

    def test_registers_unregistered_namespace(self):
        """Test the client registration call is used for unregistered namespaces"""
        self.client.get_provider_state.side_effect = ["NotRegistered", "Registered"]

        ensure_providers_registered(self.client, [NAMESPACE], SUBSCRIPTION_ID, sleep=self.clock.sleep, clock=self.clock)

        self.client.register_provider.assert_called_once_with(NAMESPACE, SUBSCRIPTION_ID)

    def test_timeout_raises_user_actionable_error(self):
        """Test the first namespace that never registers stops the run"""
        self.client.get_provider_state.return_value = "NotRegistered"

        with self.assertRaises(ResourceProviderRegistrationError) as ctx:
            ensure_providers_registered(
                self.client,
                [NAMESPACE, "Microsoft.Storage"],
                SUBSCRIPTION_ID,
                timeout=10,
                interval=5,
                sleep=self.clock.sleep,
                clock=self.clock,
            )

        error = ctx.exception
        self.assertIsInstance(error, UserActionRequiredError)
        self.assertEqual(error.namespace, NAMESPACE)
        self.assertEqual(error.last_state, "NotRegistered")
        self.assertIn(
            f"az provider register --namespace {NAMESPACE} --subscription {SUBSCRIPTION_ID}", error.user_action_message
        )
        self.assertNotIn(
            call("Microsoft.Storage", SUBSCRIPTION_ID), self.client.get_provider_state.call_args_list
        )
