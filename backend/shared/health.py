from datetime import datetime, timezone
from typing import Dict, Any, Optional


def create_health_response(
    service_name: str,
    version: str = "0.1.0",
    additional_checks: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Health payload for a service.

    Each entry of ``additional_checks`` is a named readiness probe; any falsy
    value marks the service unhealthy and is listed under ``failed_checks``.
    """
    checks = dict(additional_checks or {})
    failed = sorted(name for name, ok in checks.items() if not ok)

    health_data = {
        "service": service_name,
        "status": "unhealthy" if failed else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": version
    }
    if checks:
        health_data["checks"] = checks
        health_data["failed_checks"] = failed

    return health_data
