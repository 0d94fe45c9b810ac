"""
Tests for the gRPC health service.
"""

import os
import sys
import unittest
from unittest.mock import MagicMock

import grpc
from grpc_health.v1 import health_pb2

sys.path.append(os.path.join(os.path.dirname(__file__), "../../../main/python"))
from bounded_fib.health import HealthService, add_health_service_to_server, status_name

SERVING = health_pb2.HealthCheckResponse.SERVING
NOT_SERVING = health_pb2.HealthCheckResponse.NOT_SERVING
SERVICE_UNKNOWN = health_pb2.HealthCheckResponse.SERVICE_UNKNOWN


class TestHealthService(unittest.TestCase):
    """Test cases for the HealthService class."""

    def setUp(self):
        self.health = HealthService("bounded_fib.BoundedFibService")
        self.context = MagicMock()

    def check(self, service):
        return self.health.Check(health_pb2.HealthCheckRequest(service=service), self.context)

    def test_serving_on_start(self):
        self.assertEqual(self.check("").status, SERVING)
        self.assertEqual(self.check("bounded_fib.BoundedFibService").status, SERVING)

    def test_unknown_service(self):
        response = self.check("other.Service")
        self.assertEqual(response.status, SERVICE_UNKNOWN)
        self.context.set_code.assert_called_once_with(grpc.StatusCode.NOT_FOUND)

    def test_set_unhealthy(self):
        self.health.set_unhealthy()
        self.assertEqual(self.check("").status, NOT_SERVING)
        self.assertEqual(self.check("bounded_fib.BoundedFibService").status, NOT_SERVING)

    def test_watch_sends_current_status(self):
        responses = list(self.health.Watch(health_pb2.HealthCheckRequest(service=""), self.context))
        self.assertEqual([r.status for r in responses], [SERVING])

    def test_status_name(self):
        self.assertEqual(status_name(SERVING), "SERVING")
        self.assertEqual(status_name(99), "UNKNOWN_STATUS(99)")

    def test_add_to_server(self):
        server = MagicMock()
        health = add_health_service_to_server(server, "a.B")
        self.assertIsInstance(health, HealthService)
        self.assertTrue(server.add_generic_rpc_handlers.called)


if __name__ == "__main__":
    unittest.main()
