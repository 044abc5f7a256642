import json
import logging
import os
import threading
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)

_METRICS_PATH = os.getenv("CAMPUS_BUDDY_METRICS_PATH", "storage/metrics.json")

# Latency history is bounded so the metrics file stays small
_MAX_LATENCIES = 1000

_lock = threading.Lock()


def _empty_metrics() -> Dict:

    return {

        "total_requests": 0,
        "successful_requests": 0,
        "failed_requests": 0,

        "total_latency": 0.0,
        "avg_latency": 0.0,
        "latencies": [],

        # chat outcomes
        "chat_answers": 0,
        "chat_failures": 0,
        "syncspot_redirects": 0,
        "provider_usage": {},

        # process-document outcomes
        "documents_processed": 0,

    }


class MetricsTracker:

    def __init__(self, path: Optional[str] = _METRICS_PATH):

        self._path = path
        self._metrics = _empty_metrics()

        self._load()


    def _load(self):

        if not self._path or not os.path.exists(self._path):
            return

        try:

            with open(self._path, "r") as f:
                data = json.load(f)

        except (OSError, ValueError) as e:

            logger.warning(
                "Metrics file unreadable, starting fresh",
                extra={"path": self._path, "error": str(e)},
            )
            return

        # Older files may lack newer counters
        merged = _empty_metrics()
        merged.update(data)

        self._metrics = merged


    def _save(self):

        if not self._path:
            return

        directory = os.path.dirname(self._path)

        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self._path, "w") as f:
            json.dump(self._metrics, f, indent=2)


    def record_success(self, latency: float):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["successful_requests"] += 1
            self._metrics["total_latency"] += latency

            self._metrics["avg_latency"] = (
                self._metrics["total_latency"]
                / self._metrics["total_requests"]
            )

            latencies = self._metrics["latencies"]
            latencies.append(latency)
            del latencies[:-_MAX_LATENCIES]

            self._save()


    def record_failure(self):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["failed_requests"] += 1

            self._save()


    def record_chat(self, provider: Optional[str], redirected: bool = False):
        """Count one chat outcome. ``provider`` is None when every provider failed."""

        with _lock:

            if provider is None:
                self._metrics["chat_failures"] += 1

            else:
                usage = self._metrics["provider_usage"]
                usage[provider] = usage.get(provider, 0) + 1

                if redirected:
                    self._metrics["syncspot_redirects"] += 1
                else:
                    self._metrics["chat_answers"] += 1

            self._save()


    def record_document_processed(self):

        with _lock:

            self._metrics["documents_processed"] += 1

            self._save()


    def get_metrics(self) -> Dict:

        metrics = dict(self._metrics)
        metrics["p95_latency"] = self.get_latency_percentile(95)

        return metrics


    def get_latency_percentile(self, percentile: float) -> float:

        latencies: List[float] = self._metrics.get("latencies", [])

        if not latencies:
            return 0.0

        sorted_latencies = sorted(latencies)

        index = int(len(sorted_latencies) * percentile / 100)
        index = min(index, len(sorted_latencies) - 1)

        return sorted_latencies[index]


metrics_tracker = MetricsTracker()
