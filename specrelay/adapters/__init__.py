"""External adapters for the specrelay event adapter.

This package contains everything that touches the outside world
(terminals, files, HTTP reporters, test runners) and provides
implementations of the core port interfaces.

Adapter Organization:

- sink/: Reporter sinks receiving normalized events (stdout, JSON lines, HTTP)
- runner/: Runner integrations driving the lifecycle callbacks (unittest)
"""
