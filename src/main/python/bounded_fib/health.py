"""
gRPC health checking for the bounded Fibonacci service.

Implements the standard ``grpc.health.v1.Health`` service so the module can be
queried by load balancers and orchestration tooling.
"""

import logging
import threading

import grpc
from grpc_health.v1 import health_pb2, health_pb2_grpc

logger = logging.getLogger(__name__)

_STATUS_NAMES = {
    health_pb2.HealthCheckResponse.UNKNOWN: "UNKNOWN",
    health_pb2.HealthCheckResponse.SERVING: "SERVING",
    health_pb2.HealthCheckResponse.NOT_SERVING: "NOT_SERVING",
    health_pb2.HealthCheckResponse.SERVICE_UNKNOWN: "SERVICE_UNKNOWN",
}


class HealthService(health_pb2_grpc.HealthServicer):
    """
    Tracks a serving status per service name.

    The empty service name stands for the server as a whole.
    """

    def __init__(self, *service_names: str):
        self._service_status = {}
        self._lock = threading.RLock()
        for name in ("",) + service_names:
            self.set_status(name, health_pb2.HealthCheckResponse.SERVING)

    def Check(self, request, context):
        """Return the status of the requested service."""
        with self._lock:
            status = self._service_status.get(request.service)

        if status is None:
            logger.debug(f"Health check for unknown service '{request.service}'")
            context.set_code(grpc.StatusCode.NOT_FOUND)
            context.set_details(f"Unknown service: {request.service}")
            return health_pb2.HealthCheckResponse(status=health_pb2.HealthCheckResponse.SERVICE_UNKNOWN)

        logger.debug(f"Health check for service '{request.service}': {status_name(status)}")
        return health_pb2.HealthCheckResponse(status=status)

    def Watch(self, request, context):
        """Send the current status once."""
        with self._lock:
            status = self._service_status.get(request.service, health_pb2.HealthCheckResponse.SERVICE_UNKNOWN)
        yield health_pb2.HealthCheckResponse(status=status)

    def set_status(self, service_name: str, status):
        with self._lock:
            self._service_status[service_name] = status
        logger.info(f"Set health status for '{service_name}': {status_name(status)}")

    def set_all(self, status):
        """Apply ``status`` to every registered service name."""
        with self._lock:
            names = list(self._service_status)
        for name in names:
            self.set_status(name, status)

    def set_unhealthy(self):
        self.set_all(health_pb2.HealthCheckResponse.NOT_SERVING)


def status_name(status) -> str:
    return _STATUS_NAMES.get(status, f"UNKNOWN_STATUS({status})")


def add_health_service_to_server(server: grpc.Server, *service_names: str) -> HealthService:
    """
    Register the health service on ``server``.

    Args:
        server: The gRPC server instance
        service_names: Fully qualified names of the services to report on

    Returns:
        HealthService instance for status management
    """
    health_service = HealthService(*service_names)
    health_pb2_grpc.add_HealthServicer_to_server(health_service, server)
    logger.info("gRPC Health Service added to server")
    return health_service
