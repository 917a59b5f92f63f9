"""
RPC client and server for filer services based on ZeroMQ and MessagePack.

filerfs talks to the filer through a handful of request/response calls like
create_entry() and list_entries(), each taking a single request dataclass and returning
a single response dataclass. The transport has to satisfy a couple of requirements:

* Low overhead per call
    * Every file system operation maps to exactly one call, so latency is key.
* Multithreading support
    * A single client is shared by all threads that use the file system.
* Faithful recreation of builtin exceptions
    * A missing entry is reported by the filer as FileNotFoundError and has to reach
    the caller as FileNotFoundError rather than as a generic RPC error.
* Support for shared secret authentication

MessagePack supports fast and compact serialization of the message dataclasses without
the need for generated code. ZeroMQ takes care of framing and of the REQUEST/REPLY and
DEALER/ROUTER patterns used to spread calls over worker threads.
"""

from abc import ABC
import builtins
from dataclasses import is_dataclass
from enum import auto, Enum
import logging
import threading
import time
import typing
from typing import Any, Callable, Dict, List, NoReturn, Optional, Tuple

import msgpack
import zmq

from filerfs.logger import log, summarize


class Encoding:
    """Serialization and deserialization of messages and exceptions with MessagePack."""

    def __init__(self, *dataclasses: type):
        """Initialize a (de)serializer with support for the given dataclass types."""
        self._dataclasses: Dict[str, type] = {}

        for dataclass in dataclasses:
            self.register_dataclasses(dataclass)

    def register_dataclasses(self, seed_type: type) -> None:
        """
        Register all dataclass types used within the specified type.

        This includes the class itself, its fields, nested dataclasses, and container
        types like List and Optional.
        """
        for dataclass in self._discover_dataclasses(seed_type):
            self._dataclasses[dataclass.__qualname__] = dataclass

    def pack(self, obj: Any) -> bytes:
        """Serialize an object using MessagePack."""
        return msgpack.packb(obj, default=self.serialize_obj)

    def unpack(self, data: bytes) -> Any:
        """Deserialize an object using MessagePack."""
        return msgpack.unpackb(data, object_hook=self.deserialize_obj)

    def serialize_obj(self, obj: Any) -> Any:
        """Turn a dataclass or exception into a serializable representation."""
        if isinstance(obj, BaseException):
            return self._serialize_exception(obj)
        elif obj.__class__.__qualname__ in self._dataclasses:
            return self._serialize_dataclass(obj)
        else:
            raise ValueError(f"unserializable object {obj}")

    def deserialize_obj(self, obj: Any) -> Any:
        """Reconstruct a dataclass or exception from a serialized representation."""
        if isinstance(obj, dict) and "__exception__" in obj:
            return self._deserialize_exception(obj)
        elif isinstance(obj, dict) and "__data__" in obj:
            return self._deserialize_dataclass(obj)
        else:
            return obj

    #
    # Exception serialization
    #

    @staticmethod
    def _serialize_exception(exc: BaseException) -> Dict:
        return {"__exception__": {"name": exc.__class__.__qualname__, "args": exc.args}}

    @staticmethod
    def _deserialize_exception(obj: Dict) -> BaseException:
        """
        Reconstruct an exception from its serialized representation.

        Builtin exceptions (like FileNotFoundError) are reconstructed faithfully, others
        as a generic Exception with the original arguments.
        """
        name = obj["__exception__"]["name"]
        args = obj["__exception__"]["args"]

        builtin_exc = getattr(builtins, name, None)

        if isinstance(builtin_exc, type) and issubclass(builtin_exc, BaseException):
            return builtin_exc(*args)
        else:
            return Exception(*args)

    #
    # Dataclass serialization
    #

    @staticmethod
    def _serialize_dataclass(obj: Any) -> Dict:
        return {"__data__": {"type": obj.__class__.__qualname__, "data": obj.__dict__}}

    def _deserialize_dataclass(self, obj: Dict) -> Any:
        """
        Reconstruct a dataclass from its serialized representation.

        Only previously registered dataclass types can be deserialized.
        """
        type_name = obj["__data__"]["type"]
        type_data = obj["__data__"]["data"]

        if type_name not in self._dataclasses:
            raise TypeError(f"unknown dataclass '{type_name}'")

        try:
            return self._dataclasses[type_name](**type_data)
        except Exception as e:
            raise TypeError(f"failed to deserialize {type_name}: {e}")

    @staticmethod
    def _discover_dataclasses(*seed_types: type) -> List[type]:
        """Find all dataclass types reachable from the specified types."""
        candidates = set(seed_types)
        explored = set()
        dataclasses = set()

        while len(candidates) > 0:
            candidate = candidates.pop()

            if candidate in explored:
                continue
            explored.add(candidate)

            if is_dataclass(candidate):
                dataclasses.add(candidate)

                # Discover field types of dataclass
                for subtype in typing.get_type_hints(candidate).values():
                    candidates.add(subtype)
            elif hasattr(candidate, "__origin__"):
                # Discover types nested in constructs like Optional[T] and List[T]
                for subtype in getattr(candidate, "__args__", ()):
                    candidates.add(subtype)

        return list(dataclasses)


class ReturnType(Enum):
    """Type of result for an RPC call."""

    NORMAL = auto()
    EXCEPTION = auto()
    TOKEN_ERROR = auto()


class InvalidTokenError(RuntimeError):
    """Exception raised when an RPC call is made with a wrong authentication token."""


class Base(ABC):
    """Shared logic between RPC client and server implementation."""

    def __init__(self, service_type: type):
        """Initialize RPC (de)serialization to support the specified service class."""
        self._encoding = Encoding(*self._discover_function_types(service_type))

    @staticmethod
    def exposed_functions(service_type: type) -> List[str]:
        """Return the names of the public methods of a service class."""
        return [
            name
            for name in dir(service_type)
            if not name.startswith("_") and callable(getattr(service_type, name))
        ]

    @classmethod
    def _discover_function_types(cls, service_type: type) -> List[type]:
        """Discover all types used as parameters or return values in the service."""
        function_types: List[type] = []

        for name in cls.exposed_functions(service_type):
            function = getattr(service_type, name)
            function_types += typing.get_type_hints(function).values()

        return function_types


class Server(Base):
    """
    RPC server to expose the public methods of a service instance.

    Example:
    ```
    server = rpc.Server(MyFiler(), token="secret", worker_count=4)
    server.serve("tcp://0.0.0.0:18888")
    ```
    """

    def __init__(
        self, service: Any, token: Optional[str] = None, worker_count: int = 1
    ):
        """
        Instantiate an RPC server for the given service instance.

        If a token is specified then clients need to be initialized with that same
        token to be allowed to make calls. Incoming calls are distributed across the
        specified number of worker threads.
        """
        super().__init__(service.__class__)

        self.context = zmq.Context()

        self.service = service
        self.token = token
        self.worker_count = worker_count

        self._functions = set(self.exposed_functions(service.__class__))

    def serve(self, endpoint: str) -> NoReturn:
        """
        Start listening and handling calls for clients on the specified endpoint.

        The endpoint has the format of endpoint in zmq_bind, for example
        "tcp://0.0.0.0:18888".
        """
        socket = self.context.socket(zmq.ROUTER)
        socket.bind(endpoint)

        workers_socket = self.context.socket(zmq.DEALER)
        workers_socket.bind(f"inproc://{id(self)}")

        for _ in range(self.worker_count):
            t = threading.Thread(target=self._run_worker, daemon=True)
            t.start()

        zmq.proxy(socket, workers_socket)

        assert False, "unreachable"

    def _run_worker(self) -> NoReturn:
        """Request/response loop to handle calls for a single worker thread."""
        socket = self.context.socket(zmq.REP)
        socket.connect(f"inproc://{id(self)}")

        while True:
            token, function, *args = self._encoding.unpack(socket.recv())

            if token != self.token:
                socket.send(self._encoding.pack((ReturnType.TOKEN_ERROR.value, None)))
                continue

            # Invoke the method and return the response (value/raised exception)
            try:
                ret = self._invoke(function, args)
                socket.send(self._encoding.pack((ReturnType.NORMAL.value, ret)))
            except Exception as e:
                socket.send(self._encoding.pack((ReturnType.EXCEPTION.value, e)))

    def _invoke(self, function: Optional[str], args: List[Any]) -> Any:
        # A call without a function name is a ping
        if function is None:
            return None

        if function not in self._functions:
            raise AttributeError(f"service has no function '{function}'")

        return getattr(self.service, function)(*args)


class Client(Base):
    """
    RPC client to invoke methods on a service instance exposed by an RPC server.

    A single client can be used by multiple threads and will internally create a socket
    connection per thread.

    Example:
    ```
    filer = rpc.Client(FilerService, "tcp://localhost:18888", timeout_ms=5000)
    response = filer.list_entries(ListEntriesRequest("/", limit=100))
    ```
    """

    def __init__(
        self,
        service_type: type,
        endpoint: str,
        token: Optional[str] = None,
        timeout_ms: int = -1,
    ) -> None:
        """
        Instantiate an RPC client for the service type at the given endpoint.

        The endpoint has the format of endpoint in zmq_connect, for example
        "tcp://localhost:18888". A negative timeout waits indefinitely.
        """
        super().__init__(service_type)

        self.endpoint = endpoint
        self.token = token
        self.timeout_ms = timeout_ms

        self.context = zmq.Context()

        self._socket_pool: Dict[threading.Thread, zmq.Socket] = {}
        self._socket_pool_lock = threading.Lock()
        self._closed = False

    def _socket(self) -> zmq.Socket:
        """
        Return the socket to be used for the current thread.

        Each thread needs its own socket because requests and replies need to happen in
        lockstep per socket.
        """
        t = threading.current_thread()

        with self._socket_pool_lock:
            if t not in self._socket_pool:
                sock = self.context.socket(zmq.REQ)

                sock.setsockopt(zmq.RCVTIMEO, self.timeout_ms)
                sock.setsockopt(zmq.SNDTIMEO, self.timeout_ms)

                # A REQ socket is unusable after a timed out request, so let it
                # resynchronize instead of failing every call that follows.
                sock.setsockopt(zmq.REQ_RELAXED, 1)
                sock.setsockopt(zmq.REQ_CORRELATE, 1)

                sock.connect(self.endpoint)

                self._socket_pool[t] = sock

            return self._socket_pool[t]

    def ping(self) -> None:
        """Check if the service is available, raising IOError if it isn't."""
        self._call(None, ())

    def close(self) -> None:
        """Close the client sockets and their ZeroMQ context."""
        with self._socket_pool_lock:
            if self._closed:
                return

            for sock in self._socket_pool.values():
                sock.close(linger=0)

            self._socket_pool.clear()
            self.context.destroy(linger=0)
            self._closed = True

    def __del__(self) -> None:
        """Release the sockets when the client is garbage collected."""
        if hasattr(self, "_closed"):
            self.close()

    @property
    def socket_count(self) -> int:
        """Return the number of sockets for this client."""
        with self._socket_pool_lock:
            return len(self._socket_pool)

    @staticmethod
    def _summarize_args(args: tuple) -> Tuple[str, ...]:
        return tuple([summarize(arg) for arg in args])

    def _call(self, name: Optional[str], args: tuple) -> Any:
        """
        Call a remote function with the given arguments.

        Serializes the arguments, makes the call and deserializes the resulting return
        value or raises the resulting exception. ZeroMQ connections are stateless so
        the token is sent again with every call.
        """
        sock = self._socket()

        t_call = time.time()

        try:
            sock.send(self._encoding.pack((self.token, name, *args)))
            typ, ret = self._encoding.unpack(sock.recv())
        except zmq.ZMQError:
            raise IOError(f"rpc call to {self.endpoint} timed out")

        # Explicit check before logging because _summarize_args is relatively slow
        if log.isEnabledFor(logging.DEBUG):
            t_millis = round((time.time() - t_call) * 1000)
            log.debug(f"rpc::{name}{self._summarize_args(args)} - {t_millis} ms")

        if typ == ReturnType.NORMAL.value:
            return ret
        elif typ == ReturnType.EXCEPTION.value:
            raise ret
        elif typ == ReturnType.TOKEN_ERROR.value:
            raise InvalidTokenError("token mismatch between client and server")
        else:
            raise ValueError(f"unexpected return type {typ}")

    def __getattr__(self, name: str) -> Callable[..., Any]:
        """Retrieve a wrapper to call the specified remote function."""
        if name.startswith("_"):
            raise AttributeError(name)

        def fn(*args: Any) -> Any:
            return self._call(name, args)

        return fn
