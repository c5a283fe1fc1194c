import logging
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger("monitoring")

class ApiMonitoring:
    """Request metrics for calls made to the storefront backend"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.metrics = {
            "requests_total": 0,
            "requests_successful": 0,
            "requests_failed": 0,
            "average_response_time": 0.0,
            "last_error": None
        }
        self.endpoints: Dict[str, int] = {}

    def record_request(self, endpoint: str, success: bool, response_time_ms: float):
        """Record one backend request"""
        self.metrics["requests_total"] += 1
        self.endpoints[endpoint] = self.endpoints.get(endpoint, 0) + 1

        if success:
            self.metrics["requests_successful"] += 1
        else:
            self.metrics["requests_failed"] += 1

        # Update average response time
        current_avg = self.metrics["average_response_time"]
        total_requests = self.metrics["requests_total"]
        self.metrics["average_response_time"] = (
            (current_avg * (total_requests - 1) + response_time_ms) / total_requests
        )

    def record_error(self, error: str, endpoint: Optional[str] = None):
        """Record a failed backend call"""
        self.metrics["last_error"] = {
            "error": error,
            "endpoint": endpoint,
            "timestamp": datetime.now().isoformat()
        }
        logger.warning(f"API error: {error} (endpoint: {endpoint})")

    def get_health_status(self) -> Dict[str, Any]:
        """Summarise backend health as seen from this client"""
        total_requests = self.metrics["requests_total"]

        if total_requests == 0:
            success_rate = 100.0
        else:
            success_rate = (self.metrics["requests_successful"] / total_requests) * 100

        if success_rate >= 99 and self.metrics["average_response_time"] < 500:
            status = "EXCELLENT"
        elif success_rate >= 95 and self.metrics["average_response_time"] < 1000:
            status = "GOOD"
        elif success_rate >= 90:
            status = "WARNING"
        else:
            status = "CRITICAL"

        return {
            "status": status,
            "success_rate": round(success_rate, 2),
            "average_response_time_ms": round(self.metrics["average_response_time"], 2),
            "total_requests": total_requests,
            "requests_by_endpoint": dict(self.endpoints),
            "last_error": self.metrics["last_error"],
            "timestamp": datetime.now().isoformat()
        }

# Global monitoring instance
monitoring = ApiMonitoring()
