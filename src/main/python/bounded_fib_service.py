"""
Bounded Fibonacci gRPC Service.

This module serves sequence generation and bounds-checked access over gRPC.
Requests and responses are ``google.protobuf.Struct`` messages, so no
generated stubs are needed on either side.
"""

import argparse
import logging
import os
from concurrent import futures
from typing import Any, Dict, Iterable, List, Optional

import grpc
from google.protobuf import json_format, struct_pb2

from bounded_fib.accessor import BoundedIndexAccessor, parse_index
from bounded_fib.config import load_config
from bounded_fib.errors import BoundedFibError, ParseError
from bounded_fib.health import add_health_service_to_server
from bounded_fib.sequence import SequenceGenerator, max_position

logger = logging.getLogger(__name__)

SERVICE_NAME = "bounded_fib.BoundedFibService"
METHODS = ("Generate", "Term", "Access")


class RequestError(BoundedFibError, ValueError):
    """A request field is missing or has the wrong kind."""


def _to_struct(data: Dict[str, Any]) -> struct_pb2.Struct:
    message = struct_pb2.Struct()
    message.update(data)
    return message


def _number_to_int(name: str, value: float) -> int:
    if not float(value).is_integer():
        raise RequestError(f"Field '{name}' must be a whole number, got {value}")
    return int(value)


def _int_field(request: struct_pb2.Struct, name: str, required: bool = True) -> Optional[int]:
    """
    Read an integer field from a Struct request.

    Numbers arrive as doubles; digit strings are accepted too so that values
    beyond double precision can be sent. Strings follow the same rules as
    index text.
    """
    if name not in request.fields:
        if required:
            raise RequestError(f"Missing required field '{name}'")
        return None

    value = request.fields[name]
    kind = value.WhichOneof("kind")
    if kind == "null_value" and not required:
        return None
    if kind == "number_value":
        return _number_to_int(name, value.number_value)
    if kind == "string_value":
        try:
            return parse_index(value.string_value)
        except ParseError:
            raise RequestError(f"Field '{name}' must be an integer, got {value.string_value!r}")
    raise RequestError(f"Field '{name}' must be an integer, got {kind}")


def _raw_index_field(request: struct_pb2.Struct) -> str:
    if "index" not in request.fields:
        raise RequestError("Missing required field 'index'")

    value = request.fields["index"]
    kind = value.WhichOneof("kind")
    if kind == "string_value":
        return value.string_value
    if kind == "number_value":
        number = value.number_value
        return str(int(number)) if number.is_integer() else str(number)
    raise RequestError(f"Field 'index' must be text or a number, got {kind}")


def _collection_field(request: struct_pb2.Struct) -> Optional[List[int]]:
    if "collection" not in request.fields:
        return None

    value = request.fields["collection"]
    if value.WhichOneof("kind") != "list_value":
        raise RequestError("Field 'collection' must be a list")

    items = []
    for item in value.list_value.values:
        if item.WhichOneof("kind") != "number_value":
            raise RequestError("Field 'collection' must contain only numbers")
        items.append(_number_to_int("collection", item.number_value))
    return items


def _failure(error: Exception) -> struct_pb2.Struct:
    return _to_struct({
        "success": False,
        "error": type(error).__name__,
        "processor_logs": [str(error)],
    })


class BoundedFibServicer:
    """
    Implementation of the bounded Fibonacci gRPC service.
    """

    def __init__(self, generator: Optional[SequenceGenerator] = None,
                 collection: Optional[Iterable[int]] = None):
        """
        Initialize the servicer.

        Args:
            generator: Generator holding the default width and maximum count; a default one is
                created when omitted
            collection: Collection used by Access when a request does not
                carry its own
        """
        self.generator = generator or SequenceGenerator()
        self.accessor = BoundedIndexAccessor(collection) if collection is not None else BoundedIndexAccessor()
        logger.info("Bounded Fibonacci Service initialized")

    def _width(self, request: struct_pb2.Struct) -> Optional[int]:
        width = _int_field(request, "width", required=False)
        return self.generator.width if width is None else width

    def Generate(self, request, context):
        """Generate the seeded sequence for ``count``."""
        logger.info("Received Generate request")
        try:
            count = _int_field(request, "count")
            if count > self.generator.max_count:
                raise RequestError(f"Field 'count' must not exceed {self.generator.max_count}, got {count}")
            result = self.generator.process({"count": count, "width": self._width(request)})
            logger.info(f"Generated sequence of {len(result['sequence'])} terms for count {count}")
            return _to_struct({
                "success": True,
                "sequence": [str(value) for value in result["sequence"]],
                "rendered": result["rendered"],
                "processor_logs": [f"Generated {len(result['sequence'])} terms for count {count}"],
            })
        except (BoundedFibError, ValueError) as e:
            logger.error(f"Error generating sequence: {e}")
            return _failure(e)
        except Exception as e:
            logger.error(f"Unexpected error generating sequence: {e}", exc_info=True)
            return _failure(e)

    def Term(self, request, context):
        """Calculate the term at ``position``."""
        logger.info("Received Term request")
        try:
            position = _int_field(request, "position")
            limit = max_position(self.generator.max_count)
            if position > limit:
                raise RequestError(f"Field 'position' must not exceed {limit}, got {position}")
            value = self.generator.term(position, self._width(request))
            return _to_struct({
                "success": True,
                "value": str(value),
                "processor_logs": [f"Calculated term at position {position}"],
            })
        except (BoundedFibError, ValueError) as e:
            logger.error(f"Error calculating term: {e}")
            return _failure(e)
        except Exception as e:
            logger.error(f"Unexpected error calculating term: {e}", exc_info=True)
            return _failure(e)

    def Access(self, request, context):
        """Resolve ``index`` against the request's collection or the default one."""
        logger.info("Received Access request")
        try:
            raw_index = _raw_index_field(request)
            collection = _collection_field(request)
            accessor = self.accessor if collection is None else BoundedIndexAccessor(collection)
            result = accessor.try_access(raw_index)
        except RequestError as e:
            logger.error(f"Invalid Access request: {e}")
            return _failure(e)
        except Exception as e:
            logger.error(f"Unexpected error accessing collection: {e}", exc_info=True)
            return _failure(e)

        if not result.ok:
            logger.warning(f"Rejected index {raw_index!r}: {result.error}")
            return _failure(result.error)

        return _to_struct({
            "success": True,
            "index": result.index,
            "value": result.value,
            "processor_logs": [f"The value of the element at index {result.index} is: {result.value}"],
        })


def add_servicer_to_server(servicer: BoundedFibServicer, server: grpc.Server) -> None:
    """Register the servicer's methods under ``SERVICE_NAME``."""
    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=struct_pb2.Struct.FromString,
            response_serializer=struct_pb2.Struct.SerializeToString,
        )
        for name in METHODS
    }
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),))


class BoundedFibServiceStub:
    """Client for the service; each method takes and returns a plain dict."""

    def __init__(self, channel: grpc.Channel):
        self._calls = {
            name: channel.unary_unary(
                f"/{SERVICE_NAME}/{name}",
                request_serializer=struct_pb2.Struct.SerializeToString,
                response_deserializer=struct_pb2.Struct.FromString,
            )
            for name in METHODS
        }

    def _call(self, name: str, request: Dict[str, Any], timeout: Optional[float]) -> Dict[str, Any]:
        response = self._calls[name](_to_struct(request), timeout=timeout)
        return json_format.MessageToDict(response)

    def Generate(self, count: int, width: Optional[int] = None, timeout: Optional[float] = None):
        request = {"count": count}
        if width is not None:
            request["width"] = width
        return self._call("Generate", request, timeout)

    def Term(self, position: int, width: Optional[int] = None, timeout: Optional[float] = None):
        request = {"position": position}
        if width is not None:
            request["width"] = width
        return self._call("Term", request, timeout)

    def Access(self, index: str, collection: Optional[List[int]] = None, timeout: Optional[float] = None):
        request = {"index": index}
        if collection is not None:
            request["collection"] = list(collection)
        return self._call("Access", request, timeout)


def create_server(config: Dict[str, Any], address: Optional[str] = None):
    """
    Build an unstarted server with the service and health checks registered.

    Args:
        config: Configuration as returned by ``load_config``
        address: Bind address; defaults to ``host:port`` from the config

    Returns:
        Tuple of (server, bound port, health service)
    """
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=10))
    servicer = BoundedFibServicer(
        SequenceGenerator(config["count"], config["width"], config["max_count"]),
        config["collection"],
    )
    add_servicer_to_server(servicer, server)
    health_service = add_health_service_to_server(server, SERVICE_NAME)

    address = address or f"{config['host']}:{config['port']}"
    port = server.add_insecure_port(address)
    if port == 0:
        raise RuntimeError(f"Failed to bind {address}")
    return server, port, health_service


def serve(config: Dict[str, Any]):
    """Start the gRPC server and block until it terminates."""
    server, port, health_service = create_server(config)
    server.start()
    logger.info(f"Bounded Fibonacci Service started on {config['host']}:{port}")

    try:
        server.wait_for_termination()
    except KeyboardInterrupt:
        health_service.set_unhealthy()
        server.stop(grace=5)
        logger.info("Server stopped")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bounded Fibonacci gRPC Service")
    parser.add_argument("--config", default=os.environ.get("BOUNDED_FIB_CONFIG"),
                        help="YAML configuration file")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = load_config(args.config)
    if args.host:
        config["host"] = args.host
    if args.port is not None:
        config["port"] = args.port
    serve(config)
