#!/usr/bin/env python3
"""
Interactive Test Client for KV-REST

A simple command-line client for manually testing the KV-REST server.

Usage:
    python scripts/client.py                  # Connect to localhost:7272
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Responses carrying JSON are pretty-printed.
"""

import argparse
import json
import socket
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class KVRestClient:
    """Simple TCP client for KV-REST."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def send_command(self, command: str) -> str:
        """Send a command and receive response."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            # Ensure command ends with newline
            if not command.endswith('\n'):
                command += '\n'

            self.socket.sendall(command.encode('utf-8'))

            # Receive response
            response = b''
            while not response.endswith(b'\n'):
                chunk = self.socket.recv(65536)
                if not chunk:
                    return "ERROR: Connection closed by server"
                response += chunk

            return response.decode('utf-8').strip()

        except socket.timeout:
            return "ERROR: Request timed out"
        except OSError as e:
            return f"ERROR: {e}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def pretty(response: str) -> str:
    """Pretty-print the JSON body of an OK response."""
    status, _, body = response.partition(" ")
    if status != "OK" or not body:
        return response
    try:
        return f"{status}\n{json.dumps(json.loads(body), indent=2)}"
    except ValueError:
        return response


def print_help():
    """Print help message."""
    print("""
KV-REST Commands:
-----------------
  BROWSE [field=value ...]   List todos matching the filter
  DELETE [field=value ...]   Delete todos matching the filter
  CREATE <json>              Create a todo
  SELECT <key>               Show a todo
  REMOVE <key>               Remove a todo
  UPDATE <key> <json>        Replace a todo
  MODIFY <key> <json>        Change some fields of a todo
  QUIT                       Close connection and exit

Client Commands:
----------------
  help                       Show this help message
  exit                       Exit the client
  reconnect                  Reconnect to the server
  status                     Show connection status

Examples:
---------
  CREATE {"content": "buy milk"}
  BROWSE done=false
  MODIFY 0 {"done": true}
  DELETE done=true
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for KV-REST"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=7272,
        help="Server port (default: 7272)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("KV-REST Client")
    print("==============")
    print(f"Connecting to {args.host}:{args.port}...")

    client = KVRestClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: python -m kvrest.server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    client.send_command("QUIT")
                    print("Goodbye!")
                    break

                if lower_cmd == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if lower_cmd == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                print(pretty(client.send_command(command)))

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
