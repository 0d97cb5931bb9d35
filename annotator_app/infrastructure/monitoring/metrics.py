"""
Infrastructure Layer - Metrics and Performance Monitoring

Per-domain request counters and timings for storage and service operations.
"""
import time
import statistics
from collections import Counter
from datetime import datetime
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field


@dataclass
class DomainMetrics:
    """Metrics for a specific domain"""
    domain_name: str
    request_count: int = 0
    success_count: int = 0
    error_count: int = 0
    response_times: List[float] = field(default_factory=list)
    operations: Counter = field(default_factory=Counter)
    last_request_time: Optional[datetime] = None
    avg_response_time: float = 0.0

    def add_request(self, success: bool, response_time: float, operation: Optional[str] = None):
        """Add a request to the metrics"""
        self.request_count += 1
        if success:
            self.success_count += 1
        else:
            self.error_count += 1
        if operation:
            self.operations[operation] += 1

        self.response_times.append(response_time)
        self.last_request_time = datetime.now()

        # Keep only last 1000 response times
        if len(self.response_times) > 1000:
            self.response_times = self.response_times[-1000:]

        self.avg_response_time = statistics.mean(self.response_times)

    def get_success_rate(self) -> float:
        """Get success rate as percentage"""
        if self.request_count == 0:
            return 0.0
        return (self.success_count / self.request_count) * 100

    def get_response_time_stats(self) -> Dict[str, float]:
        """Get response time statistics"""
        if not self.response_times:
            return {"avg": 0.0, "min": 0.0, "max": 0.0, "median": 0.0}

        return {
            "avg": statistics.mean(self.response_times),
            "min": min(self.response_times),
            "max": max(self.response_times),
            "median": statistics.median(self.response_times)
        }


class MetricsCollector:
    """
    Centralized metrics collection for application monitoring.

    Responsibilities:
    - Collect request counts and timings per domain
    - Break requests down by operation name
    - Summarize health for the health endpoint
    """

    def __init__(self, response_time_threshold: float = 2.0, error_rate_threshold: float = 5.0):
        self.domain_metrics: Dict[str, DomainMetrics] = {}
        self.start_time = time.time()
        self.total_requests = 0
        self.total_errors = 0
        self.response_time_threshold = response_time_threshold
        self.error_rate_threshold = error_rate_threshold

    def record_domain_request(self, domain: str, success: bool, response_time: float,
                              context: Optional[Dict[str, Any]] = None):
        """
        Record a request for a specific domain.

        Args:
            domain: Domain name (e.g., 'storage', 'vocabulary')
            success: Whether the request was successful
            response_time: Response time in seconds
            context: Additional context; ``operation`` is counted
        """
        if domain not in self.domain_metrics:
            self.domain_metrics[domain] = DomainMetrics(domain_name=domain)

        operation = (context or {}).get("operation")
        self.domain_metrics[domain].add_request(success, response_time, operation)
        self.total_requests += 1
        if not success:
            self.total_errors += 1

    def get_domain_metrics(self, domain: str) -> Optional[Dict[str, Any]]:
        """Get metrics for a specific domain"""
        if domain not in self.domain_metrics:
            return None

        metrics = self.domain_metrics[domain]
        return {
            "domain": domain,
            "request_count": metrics.request_count,
            "success_count": metrics.success_count,
            "error_count": metrics.error_count,
            "success_rate": f"{metrics.get_success_rate():.1f}%",
            "response_times": metrics.get_response_time_stats(),
            "operations": dict(metrics.operations),
            "last_request": metrics.last_request_time.isoformat() if metrics.last_request_time else None
        }

    def get_health_dashboard(self) -> Dict[str, Any]:
        """Get health dashboard data"""
        uptime = time.time() - self.start_time
        domains = {}
        alerts = []

        for domain, metrics in self.domain_metrics.items():
            success_rate = metrics.get_success_rate()
            error_rate = 100.0 - success_rate if metrics.request_count else 0.0

            if success_rate >= 95 and metrics.avg_response_time <= 1.0:
                status = "excellent"
            elif success_rate >= 90 and metrics.avg_response_time <= self.response_time_threshold:
                status = "good"
            else:
                status = "poor"

            domains[domain] = self.get_domain_metrics(domain)
            domains[domain]["status"] = status

            if error_rate > self.error_rate_threshold:
                alerts.append({
                    "type": "high_error_rate",
                    "domain": domain,
                    "current_value": f"{error_rate:.1f}%",
                    "threshold": f"{self.error_rate_threshold:.1f}%"
                })
            if metrics.avg_response_time > self.response_time_threshold:
                alerts.append({
                    "type": "slow_response",
                    "domain": domain,
                    "current_value": f"{metrics.avg_response_time:.3f}s",
                    "threshold": f"{self.response_time_threshold:.1f}s"
                })

        return {
            "system": {
                "uptime_hours": uptime / 3600,
                "total_requests": self.total_requests,
                "total_errors": self.total_errors
            },
            "domains": domains,
            "alerts": alerts,
            "timestamp": datetime.now().isoformat()
        }
