# reactornet

reactornet is a small networking library built around the reactor pattern:
one event loop per thread, a main loop that accepts connections and hands
them round-robin to a pool of worker loops, timers driven by the loop, and a
background logger that batches log lines into rolling files.

On top of the TCP layer sits a minimal HTTP/1.0 and HTTP/1.1 server.

It needs a POSIX system and Python 3.10 or later, and has no third-party
dependencies. Readiness is polled with `epoll` where the platform has it and
with `poll` otherwise; setting the environment variable `REACTORNET_USE_POLL`
to a non-empty value forces `poll`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The echo server

The package ships with an echo server that uses four worker loops and
writes its log to rolling files in the current directory, named after the
program and the time each file was opened:

```
reactornet-echo
reactornet-echo --port 9000
```

It listens on port 8088 unless `--port` is given. Every message a client
sends is written straight back to it. Stop it with Ctrl-C.

The same server can be started from code:

```python
from reactornet.echo_server import EchoServer
from reactornet.event_loop import EventLoop
from reactornet.inet_address import InetAddress

with EventLoop() as loop:
    server = EchoServer(loop, InetAddress(8088), "EchoServer")
    server.start()
    loop.loop()
```

## Building blocks

### Event loops and timers

`EventLoop` belongs to the thread that created it; a second loop in the same
thread is a fatal error. Work can be handed to it from any thread with
`run_in_loop` or `queue_in_loop`, and timers are scheduled with `run_at`,
`run_after` and `run_every`. `quit` stops the loop after its current
iteration, and `close` releases its resources.

```python
from reactornet.event_loop import EventLoop

loop = EventLoop()
loop.run_every(1.0, lambda: print("tick"))
loop.run_after(5.0, loop.quit)
loop.loop()
loop.close()
```

`EventLoopThread` starts a loop in its own thread; `start_loop` returns that
loop once it exists. `EventLoopThreadPool` keeps several of them and returns
them in turn from `get_next_loop`. With no worker threads the pool hands back
the base loop.

### TCP server

`TcpServer` owns an `Acceptor` on the main loop and one `TcpConnection` per
client. Set `connection_callback`, `message_callback` and
`write_complete_callback` on the server before starting it;
`set_thread_num` chooses how many worker loops serve the connections, and
`start` begins listening.

```python
from reactornet.event_loop import EventLoop
from reactornet.inet_address import InetAddress
from reactornet.tcp_server import TcpServer


def on_message(conn, buf, receive_time):
    conn.send(buf.retrieve_all_as_bytes())


loop = EventLoop()
server = TcpServer(loop, InetAddress(9000), "demo")
server.message_callback = on_message
server.set_thread_num(4)
server.start()
loop.loop()
```

`TcpConnection.send` accepts bytes, text or a `Buffer`; `shutdown` closes the
writing half once queued output has gone out. A high-water-mark callback can
be set with `set_high_water_mark_callback`.

Addresses are plain values:

```python
from reactornet.inet_address import InetAddress

InetAddress(9090).to_ip_port()               # '0.0.0.0:9090'
InetAddress(80, "127.0.0.1").to_ip()         # '127.0.0.1'
```

### Buffers

`Buffer` is the growable byte buffer used for connection input and output:

```python
from reactornet.buffer import Buffer

buf = Buffer()
buf.append(b"hello\r\nworld")
buf.readable_bytes()          # 12
buf.retrieve_as_string(5)     # 'hello'
```

### HTTP

`HttpContext` parses a request line and headers out of a `Buffer`, and
`HttpResponse` serialises a reply:

```python
from reactornet.buffer import Buffer
from reactornet.http_context import HttpContext
from reactornet.http_response import HttpResponse, StatusCode
from reactornet.timestamp import Timestamp

buf = Buffer()
buf.append(b"GET /index.html?id=1 HTTP/1.1\r\nHost: localhost\r\n\r\n")

context = HttpContext()
if context.parse_request(buf, Timestamp.now()) and context.got_all():
    request = context.request        # path '/index.html', query '?id=1'

response = HttpResponse(False)
response.status_code = StatusCode.OK
response.status_message = "OK"
response.set_content_type("text/plain")
response.body = "hello"
payload = response.to_bytes()
```

`HttpServer` wires this into a `TcpServer`. Assign a function taking the
request and the response to its `http_callback`; the default,
`default_http_callback`, answers every request with `404 Not Found` and
closes the connection. A malformed request line gets `400 Bad Request`.

### Logging

Log lines carry a timestamp, the level, the message and the source location.
The arguments are joined without separators. Lines go to standard output
unless another sink is set with `set_output`; a `fatal` record is written,
flushed and then raises `FatalLogError`.

```python
from reactornet.log import LogLevel, info, set_log_level, warn

set_log_level(LogLevel.DEBUG)
info("server started on port ", 8088)
warn("slow request: ", 1.5, " seconds")
```

`AsyncLogging` collects lines in memory and writes them from a background
thread into files named after a base name and the time of creation, rolling
over when a file grows past the given size or a day passes:

```python
from reactornet.async_logging import AsyncLogging
from reactornet.log import info, set_output

with AsyncLogging("myapp", 500 * 1000 * 1000) as backend:
    set_output(backend.append)
    info("written by the background thread")
    set_output(None)
```

`LogFile` can also be used on its own for synchronous rolling files.

### Threads

`ThreadPool` runs tasks on a fixed number of worker threads, with a queue
bounded by the number of threads; with no workers, tasks run in the caller's
thread:

```python
from reactornet.thread_pool import ThreadPool

with ThreadPool("workers", 4, None) as pool:
    for n in range(10):
        pool.add(lambda n=n: print("task", n))
```

Leaving the `with` block stops the pool; tasks still queued at that moment
are dropped.

### Timestamps

```python
from reactornet.timestamp import Timestamp, add_time, time_difference

start = Timestamp.now()
later = add_time(start, 1.5)
time_difference(later, start)        # 1.5
start.to_formatted_string(True)      # e.g. '2024/05/01 12:00:00.123456'
```

## What it does not do

- There is no client side: the package accepts connections but has nothing
  for opening outgoing ones.
- The HTTP server reads only the request line and headers; request bodies
  are not parsed, and each batch of received data is parsed as a new
  request.
- There is no TLS and no IPv6; addresses are IPv4 only.
- There is no database access or connection pooling.