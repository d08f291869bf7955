"""Resource-data collector backed by Prometheus.

Reads kube-state-metrics (pod phase, owners, requests, limits) and cAdvisor
(usage) series through the Prometheus HTTP API and groups running pods by
namespace. CPU is normalized to millicores and memory to MiB.
"""
import logging
from typing import Dict, List

from models.workloads import WorkloadUsage
from utils.http_client import HTTPClient, APIError

logger = logging.getLogger("kubedeck.collector")

MIB = 1024 * 1024

RUNNING_PODS = 'kube_pod_status_phase{phase="Running"} == 1'
POD_OWNERS = "kube_pod_owner"
POD_LIMITS = 'sum by (namespace, pod, resource) (kube_pod_container_resource_limits{resource=~"cpu|memory"})'
POD_REQUESTS = 'sum by (namespace, pod, resource) (kube_pod_container_resource_requests{resource=~"cpu|memory"})'
POD_CPU_USAGE = ('sum by (namespace, pod) '
                 '(rate(container_cpu_usage_seconds_total{container!="",container!="POD"}[5m]))')
POD_MEMORY_USAGE = ('sum by (namespace, pod) '
                    '(container_memory_working_set_bytes{container!="",container!="POD"})')


class CollectorError(Exception):
    """Collecting resource data failed; the check cycle is aborted."""


def _sample_value(sample):
    try:
        return float(sample["value"][1])
    except (KeyError, IndexError, TypeError, ValueError):
        return None


def _percentage(usage, limit):
    if usage is None or not limit:
        return None
    return round(usage / limit * 100, 1)


class ResourceCollector:
    def __init__(self, prometheus_url, timeout=30, max_retries=1, excluded_namespaces=None):
        self.client = HTTPClient(prometheus_url, timeout=timeout, max_retries=max_retries,
                                 source="prometheus")
        self.excluded_namespaces = set(excluded_namespaces or [])

    @classmethod
    def from_config(cls, config):
        prom = config["prometheus"]
        return cls(
            prom["url"],
            timeout=prom.get("timeout", 30),
            max_retries=prom.get("max_retries", 1),
            excluded_namespaces=prom.get("excluded_namespaces", []),
        )

    def query(self, promql) -> list:
        """Run an instant query and return the result vector."""
        try:
            data = self.client.get("/api/v1/query", params={"query": promql})
        except APIError as e:
            raise CollectorError(f"prometheus query failed: {e}") from e

        if not isinstance(data, dict) or data.get("status") != "success":
            raise CollectorError(f"prometheus error for {promql!r}: {data}")
        return data.get("data", {}).get("result", [])

    def _by_pod(self, promql, scale=1.0) -> Dict[tuple, float]:
        values = {}
        for sample in self.query(promql):
            metric = sample.get("metric", {})
            value = _sample_value(sample)
            if value is None:
                continue
            values[(metric.get("namespace"), metric.get("pod"))] = value * scale
        return values

    def _resources_by_pod(self, promql) -> Dict[tuple, Dict[str, float]]:
        values = {}
        for sample in self.query(promql):
            metric = sample.get("metric", {})
            value = _sample_value(sample)
            if value is None:
                continue
            key = (metric.get("namespace"), metric.get("pod"))
            resource = metric.get("resource")
            if resource == "cpu":
                values.setdefault(key, {})["cpu"] = value * 1000
            elif resource == "memory":
                values.setdefault(key, {})["memory"] = value / MIB
        return values

    def collect(self) -> Dict[str, List[WorkloadUsage]]:
        """Usage and declared resources of running pods, grouped by namespace."""
        running = self.query(RUNNING_PODS)
        owners = {}
        for sample in self.query(POD_OWNERS):
            metric = sample.get("metric", {})
            owners[(metric.get("namespace"), metric.get("pod"))] = (
                metric.get("owner_name", ""), metric.get("owner_kind", "None"),
            )
        limits = self._resources_by_pod(POD_LIMITS)
        requests_ = self._resources_by_pod(POD_REQUESTS)
        cpu_usage = self._by_pod(POD_CPU_USAGE, scale=1000)
        mem_usage = self._by_pod(POD_MEMORY_USAGE, scale=1.0 / MIB)

        result: Dict[str, List[WorkloadUsage]] = {}
        for sample in running:
            metric = sample.get("metric", {})
            namespace, pod = metric.get("namespace"), metric.get("pod")
            if not namespace or not pod or namespace in self.excluded_namespaces:
                continue

            key = (namespace, pod)
            owner_name, owner_kind = owners.get(key, ("", "None"))
            limit = limits.get(key, {})
            request = requests_.get(key, {})
            cpu = cpu_usage.get(key)
            mem = mem_usage.get(key)

            usage = WorkloadUsage(
                name=pod,
                owner_name=owner_name,
                owner_kind=owner_kind,
                cpu_request=int(request.get("cpu", 0)),
                cpu_limit=int(limit.get("cpu", 0)),
                memory_request=int(request.get("memory", 0)),
                memory_limit=int(limit.get("memory", 0)),
                cpu_usage=round(cpu, 1) if cpu is not None else None,
                memory_usage=round(mem, 1) if mem is not None else None,
                cpu_percentage=_percentage(cpu, limit.get("cpu")),
                mem_percentage=_percentage(mem, limit.get("memory")),
            )
            result.setdefault(namespace, []).append(usage)

        for pods in result.values():
            pods.sort(key=lambda w: w.name)
        logger.info(f"Collected {sum(len(p) for p in result.values())} running pods "
                    f"across {len(result)} namespaces")
        return result
