"""Integration tests for the full discovery pipeline.

Each test exercises: generic manifest -> kind dispatch -> typed conversion
-> pod template -> reference scan + Service match -> aggregated references.
"""

from __future__ import annotations

import asyncio

import pytest

from kubedeps.errors import ClusterQueryError, MalformedWorkloadError, UnsupportedKindError
from kubedeps.interpreter import DependencyInterpreter, StaticServiceReader
from kubedeps.models.references import ServiceDescriptor

from .conftest import as_set, make_pod_spec, make_service, make_workload

pytestmark = pytest.mark.integration

_EXPECTED = {
    ("ConfigMap", "default", "app-settings"),
    ("ConfigMap", "default", "ca-bundle"),
    ("Secret", "default", "api-token"),
    ("Secret", "default", "app-tls"),
    ("Secret", "default", "db-credentials"),
    ("Secret", "default", "registry-creds"),
    ("Secret", "default", "signing-key"),
    ("Service", "default", "svc-a"),
    ("Service", "default", "svc-np"),
}


class _FailingReader:
    async def list_services(self, namespace: str) -> list[ServiceDescriptor]:
        raise ClusterQueryError(namespace, "API error 503: Service Unavailable")


# ---------------------------------------------------------------------------
# Every supported kind
# ---------------------------------------------------------------------------


class TestSupportedKinds:
    @pytest.mark.parametrize("kind", ["Deployment", "DaemonSet", "StatefulSet", "Job", "Pod"])
    async def test_kind_yields_full_dependency_set(self, interpreter: DependencyInterpreter, kind: str) -> None:
        refs = await interpreter.get_dependencies(make_workload(kind=kind))
        assert as_set(refs) == _EXPECTED

    async def test_all_references_are_core_v1(self, interpreter: DependencyInterpreter) -> None:
        refs = await interpreter.get_dependencies(make_workload())
        assert {ref.api_version for ref in refs} == {"v1"}

    async def test_groups_ordered_configmap_secret_service(self, interpreter: DependencyInterpreter) -> None:
        refs = await interpreter.get_dependencies(make_workload())
        kinds = [ref.kind for ref in refs]
        assert kinds == sorted(kinds, key=["ConfigMap", "Secret", "Service"].index)

    async def test_wire_shape(self, interpreter: DependencyInterpreter) -> None:
        refs = await interpreter.get_dependencies(make_workload())
        assert refs[0].to_dict().keys() == {"apiVersion", "kind", "namespace", "name"}


# ---------------------------------------------------------------------------
# Testable properties
# ---------------------------------------------------------------------------


class TestProperties:
    async def test_determinism_as_set(self, interpreter: DependencyInterpreter) -> None:
        obj = make_workload()
        first = as_set(await interpreter.get_dependencies(obj))
        for _ in range(5):
            assert as_set(await interpreter.get_dependencies(obj)) == first

    async def test_configmap_via_env_and_volume_appears_once(self, interpreter: DependencyInterpreter) -> None:
        refs = await interpreter.get_dependencies(make_workload())
        app_settings = [r for r in refs if r.kind == "ConfigMap" and r.name == "app-settings"]
        assert len(app_settings) == 1

    async def test_no_references_and_no_services_is_empty(self) -> None:
        interpreter = DependencyInterpreter(StaticServiceReader())
        obj = make_workload(pod_spec={"containers": [{"name": "c", "image": "busybox"}]})
        assert await interpreter.get_dependencies(obj) == []

    async def test_controller_template_uses_owner_namespace(self) -> None:
        reader = StaticServiceReader([make_service("svc-a", {"app": "web"}, namespace="staging")])
        interpreter = DependencyInterpreter(reader)
        refs = await interpreter.get_dependencies(make_workload(namespace="staging"))
        assert {ref.namespace for ref in refs} == {"staging"}
        assert ("Service", "staging", "svc-a") in as_set(refs)

    async def test_missing_namespace_defaults(self, interpreter: DependencyInterpreter) -> None:
        refs = await interpreter.get_dependencies(make_workload(namespace=None))
        assert {ref.namespace for ref in refs} == {"default"}

    async def test_concurrent_discoveries_are_independent(self, interpreter: DependencyInterpreter) -> None:
        objs = [make_workload(name=f"app-{i}") for i in range(10)]
        results = await asyncio.gather(*(interpreter.get_dependencies(obj) for obj in objs))
        assert all(as_set(refs) == _EXPECTED for refs in results)


# ---------------------------------------------------------------------------
# Error paths
# ---------------------------------------------------------------------------


class TestErrors:
    async def test_unsupported_kind(self, interpreter: DependencyInterpreter) -> None:
        obj = {"apiVersion": "batch/v1", "kind": "CronJob", "metadata": {"name": "nightly"}, "spec": {}}
        with pytest.raises(UnsupportedKindError):
            await interpreter.get_dependencies(obj)

    async def test_same_kind_other_group_is_unsupported(self, interpreter: DependencyInterpreter) -> None:
        obj = make_workload()
        obj["apiVersion"] = "extensions/v1beta1"
        with pytest.raises(UnsupportedKindError):
            await interpreter.get_dependencies(obj)

    async def test_malformed_workload(self, interpreter: DependencyInterpreter) -> None:
        obj = make_workload()
        obj["spec"]["template"]["spec"]["containers"] = "not-a-list"
        with pytest.raises(MalformedWorkloadError) as exc_info:
            await interpreter.get_dependencies(obj)
        assert exc_info.value.kind == "Deployment"
        assert "containers" in exc_info.value.reason

    async def test_cluster_query_error_propagates(self) -> None:
        interpreter = DependencyInterpreter(_FailingReader())
        with pytest.raises(ClusterQueryError) as exc_info:
            await interpreter.get_dependencies(make_workload())
        assert exc_info.value.namespace == "default"


# ---------------------------------------------------------------------------
# Batch isolation
# ---------------------------------------------------------------------------


class TestDiscoverAll:
    async def test_one_malformed_object_does_not_affect_others(self, interpreter: DependencyInterpreter) -> None:
        malformed = make_workload(name="broken")
        del malformed["spec"]["template"]
        objs = [make_workload(name="a"), malformed, make_workload(kind="Pod", name="b"), make_workload(name="c")]

        outcomes = await interpreter.discover_all(objs)

        assert len(outcomes) == 4
        assert [o.name for o in outcomes] == ["a", "broken", "b", "c"]
        assert isinstance(outcomes[1].error, MalformedWorkloadError)
        assert outcomes[1].dependencies == []
        for outcome in (outcomes[0], outcomes[2], outcomes[3]):
            assert outcome.ok
            assert as_set(outcome.dependencies) == _EXPECTED

    async def test_unsupported_kind_is_reported_per_object(self, interpreter: DependencyInterpreter) -> None:
        objs = [
            {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "app-settings"}},
            make_workload(kind="Job", name="migrate"),
        ]
        outcomes = await interpreter.discover_all(objs)
        assert isinstance(outcomes[0].error, UnsupportedKindError)
        assert outcomes[1].ok

    async def test_cluster_errors_are_captured(self) -> None:
        interpreter = DependencyInterpreter(_FailingReader())
        outcomes = await interpreter.discover_all([make_workload(name="a"), make_workload(name="b")])
        assert all(isinstance(o.error, ClusterQueryError) for o in outcomes)
        assert outcomes[0].to_dict()["error"]["type"] == "ClusterQueryError"

    async def test_bare_pod_without_template_indirection(self, interpreter: DependencyInterpreter) -> None:
        pod = make_workload(kind="Pod", labels={"app": "web"}, pod_spec=make_pod_spec())
        outcomes = await interpreter.discover_all([pod])
        services = {r.name for r in outcomes[0].dependencies if r.kind == "Service"}
        assert services == {"svc-a"}
