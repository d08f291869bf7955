"""Recommendation engine client: OpenAI-compatible chat completions.

Sends the collected usage to a hosted model and parses its reply into a
Recommendation. The reply is expected to be a bare JSON object; fenced or
chatty replies are unwrapped on a best-effort basis.
"""
import json
import logging
from typing import Dict, List

from models.recommendation import Recommendation
from models.workloads import WorkloadUsage
from utils.http_client import HTTPClient, APIError

logger = logging.getLogger("kubedeck.recommender")

DEFAULT_TIMEOUT = 45

RESPONSE_SCHEMA = """{
  "message": "<short overall summary>",
  "namespaces": {
    "<namespace>": [
      {"name": "<pod>", "status": "info|warning|critical",
       "cpu": <suggested limit in millicores or -1>,
       "memory": <suggested limit in MiB or -1>,
       "replicas": <suggested replicas or -1>}
    ]
  }
}"""


class RecommendationError(Exception):
    """The recommendation engine failed or returned an unusable reply."""
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def _describe(workload: WorkloadUsage) -> str:
    parts = [f"- {workload.name}"]
    if workload.owner_name:
        parts.append(f"(owner {workload.owner_kind}/{workload.owner_name})")
    parts.append(f"cpu limit {workload.cpu_limit}m request {workload.cpu_request}m,")
    parts.append(f"memory limit {workload.memory_limit}Mi request {workload.memory_request}Mi")
    if workload.cpu_usage is not None:
        parts.append(f"| cpu used {workload.cpu_usage}m")
        if workload.cpu_percentage is not None:
            parts.append(f"({workload.cpu_percentage}% of limit)")
    if workload.memory_usage is not None:
        parts.append(f"| memory used {workload.memory_usage}Mi")
        if workload.mem_percentage is not None:
            parts.append(f"({workload.mem_percentage}% of limit)")
    return " ".join(parts)


def build_prompt(usage: Dict[str, List[WorkloadUsage]], style_hint="") -> str:
    lines = [
        "You are a Kubernetes capacity advisor. Below is the resource usage of "
        "every running pod, grouped by namespace.",
        "Flag pods that are over-provisioned, close to their limits, or missing limits.",
        "Only include flagged pods. Use -1 for any value that should stay as it is.",
        "",
    ]
    for namespace in sorted(usage):
        lines.append(f"Namespace {namespace}:")
        lines.extend(_describe(w) for w in usage[namespace])
        lines.append("")

    lines.append("Reply with a single JSON object and nothing else, using this schema:")
    lines.append(RESPONSE_SCHEMA)
    if style_hint:
        lines.append("")
        lines.append(f"Style of the message field: {style_hint}")
    return "\n".join(lines)


def parse_recommendation(content: str) -> Recommendation:
    """Parse the model reply, unwrapping code fences or surrounding prose."""
    text = (content or "").strip()
    candidates = [text]

    if text.startswith("```"):
        body = text.split("\n", 1)[1] if "\n" in text else ""
        candidates.append(body.rsplit("```", 1)[0].strip())

    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    last_error = None
    for candidate in candidates:
        try:
            return Recommendation.from_dict(json.loads(candidate))
        except ValueError as e:
            last_error = e

    raise RecommendationError(f"could not parse recommendation: {last_error}")


class RecommendationEngine:
    def __init__(self, api_url, model, api_key="", timeout=DEFAULT_TIMEOUT):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            logger.warning("LLM API key is not set; requests may be rejected")
        self.model = model
        self.timeout = timeout
        self.client = HTTPClient(api_url, timeout=timeout, max_retries=0,
                                 headers=headers, source="llm")

    @classmethod
    def from_config(cls, config):
        llm = config["llm"]
        return cls(
            llm["api_url"],
            llm["model"],
            api_key=llm.get("api_key", ""),
            timeout=llm.get("timeout", DEFAULT_TIMEOUT),
        )

    def complete(self, prompt) -> str:
        """Send one user message and return the reply content."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }
        try:
            data = self.client.post(json=payload)
        except APIError as e:
            raise RecommendationError(f"LLM request failed: {e}", status_code=e.status_code) from e

        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise RecommendationError(f"unexpected LLM response: {str(data)[:200]}")

    def recommend(self, usage, style_hint="") -> Recommendation:
        content = self.complete(build_prompt(usage, style_hint))
        recommendation = parse_recommendation(content)
        logger.info(f"LLM flagged {recommendation.flagged_count} workloads "
                    f"in {len(recommendation.namespaces)} namespaces")
        return recommendation
