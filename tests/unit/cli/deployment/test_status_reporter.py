"""Tests for status snapshots."""

from unittest.mock import MagicMock

import pytest

from src.cli.deployment.helm_deployer.status_reporter import (
    StatusReporter,
    StatusSnapshot,
)
from src.infra.k8s.controller import EventInfo, IngressInfo, PodInfo, ServiceInfo
from src.infra.k8s.errors import KubernetesApiError
from tests.fakes import FakeController, FakeReleaseManager


def _populated_controller() -> FakeController:
    controller = FakeController(namespaces={"flyte"})
    controller.pods["flyte"] = [
        PodInfo(name="flyte-binary-abc", status="Running", ready=True),
        PodInfo(name="flyte-binary-def", status="Pending", ready=False),
    ]
    controller.services["flyte"] = [
        ServiceInfo(name="flyte-binary-http", type="ClusterIP", cluster_ip="10.0.0.1")
    ]
    controller.events["flyte"] = [
        EventInfo(type="Normal", reason="Pulled", object="Pod/a", message="ok"),
        EventInfo(
            type="Warning", reason="BackOff", object="Pod/b", message="restarting"
        ),
    ]
    return controller


class TestStatusReporter:
    def test_missing_namespace(self) -> None:
        snapshot = StatusReporter(FakeController()).snapshot("flyte")

        assert snapshot == StatusSnapshot.missing("flyte")
        assert not snapshot.namespace_exists
        assert not snapshot.healthy

    def test_populated_namespace(self) -> None:
        snapshot = StatusReporter(_populated_controller()).snapshot("flyte")

        assert snapshot.namespace_exists
        assert snapshot.ready_count == 1
        assert snapshot.total_count == 2
        assert [s.name for s in snapshot.services] == ["flyte-binary-http"]
        assert [e.reason for e in snapshot.warning_events] == ["BackOff"]
        assert not snapshot.healthy

    def test_no_ingress_is_none(self) -> None:
        snapshot = StatusReporter(_populated_controller()).snapshot("flyte")

        assert snapshot.ingress is None
        assert snapshot.console_host is None

    def test_ingress_without_hostname_is_distinct_from_none(self) -> None:
        controller = _populated_controller()
        controller.ingresses["flyte"] = [IngressInfo(name="flyte", hosts=["flyte.example.com"])]

        snapshot = StatusReporter(controller).snapshot("flyte")

        assert snapshot.ingress == [IngressInfo(name="flyte", hosts=["flyte.example.com"])]
        assert snapshot.console_host is None

    def test_console_host_from_load_balancer(self) -> None:
        controller = _populated_controller()
        controller.ingresses["flyte"] = [
            IngressInfo(name="a"),
            IngressInfo(name="b", load_balancer_hostname="k8s-flyte.elb.amazonaws.com"),
        ]

        snapshot = StatusReporter(controller).snapshot("flyte")

        assert snapshot.console_host == "k8s-flyte.elb.amazonaws.com"

    def test_healthy_requires_ready_pods_and_endpoints(self) -> None:
        controller = _populated_controller()
        controller.pods["flyte"] = [PodInfo(name="p", status="Running", ready=True)]
        reporter = StatusReporter(controller)

        assert not reporter.snapshot("flyte").healthy

        controller.endpoints.add(("flyte", "flyte-binary-http"))
        assert reporter.snapshot("flyte").healthy

    def test_queries_use_readiness_selector_and_are_read_only(self) -> None:
        controller = MagicMock()
        controller.namespace_exists.return_value = True
        controller.get_pods.return_value = []
        controller.get_services.return_value = []
        controller.get_ingresses.return_value = []
        controller.get_events.return_value = []
        controller.service_has_endpoints.return_value = False

        StatusReporter(controller).snapshot("flyte")

        controller.get_pods.assert_called_once_with(
            "flyte", "app.kubernetes.io/name=flyte-binary"
        )
        controller.get_events.assert_called_once_with("flyte", 10)
        controller.create_namespace.assert_not_called()
        controller.apply_secret.assert_not_called()
        controller.delete_namespace.assert_not_called()

    def test_unreachable_cluster_raises_instead_of_reporting_missing(self) -> None:
        controller = _populated_controller()
        controller.unreachable = True

        with pytest.raises(KubernetesApiError):
            StatusReporter(controller).snapshot("flyte")

    def test_release_presence_from_release_manager(self) -> None:
        controller = _populated_controller()
        release_manager = FakeReleaseManager()

        snapshot = StatusReporter(
            controller, release_manager=release_manager
        ).snapshot("flyte")

        assert snapshot.release_installed is False

        release_manager.releases[("flyte", "flyte-binary")] = "v1.10.6"
        snapshot = StatusReporter(
            controller, release_manager=release_manager
        ).snapshot("flyte")

        assert snapshot.release_installed is True

    def test_missing_release_is_not_healthy(self) -> None:
        controller = _populated_controller()
        controller.pods["flyte"] = [PodInfo(name="p", status="Running", ready=True)]
        controller.endpoints.add(("flyte", "flyte-binary-http"))

        snapshot = StatusReporter(
            controller, release_manager=FakeReleaseManager()
        ).snapshot("flyte")

        assert not snapshot.healthy

    def test_release_unknown_without_release_manager(self) -> None:
        snapshot = StatusReporter(_populated_controller()).snapshot("flyte")

        assert snapshot.release_installed is None
