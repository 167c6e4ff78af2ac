"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of responses.
"""

from typing import Dict, Optional

from .commands import Command, CommandType, Response
from ..config.settings import settings


class ProtocolParser:
    """
    Parser for the KV-REST text protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]\n
        Response: OK <json>\n | ERROR [code] <message>\n

    Commands:
        BROWSE [field=value ...]   -> OK <json list>
        DELETE [field=value ...]   -> OK <json list>
        CREATE <json>              -> OK <json>
        SELECT <key>               -> OK <json> | ERROR key_missing ...
        REMOVE <key>               -> OK <json> | ERROR key_missing ...
        UPDATE <key> <json>        -> OK <json>
        MODIFY <key> <json>        -> OK <json>
        QUIT                       -> (connection closed)

    Constraints:
        - Keys: max 256 characters, no whitespace
        - Payloads: max 65536 characters, rest of the line
        - Filter parameters: field=value tokens, no whitespace
    """

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_key_length = settings.MAX_KEY_LENGTH
        self.max_payload_length = settings.MAX_PAYLOAD_LENGTH

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.
            Returns Command with type=UNKNOWN for invalid/malformed requests.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request('UPDATE 3 {"content": "x"}')
            >>> cmd.type == CommandType.UPDATE
            True
            >>> cmd.key
            '3'
            >>> cmd.payload
            '{"content": "x"}'
        """
        raw = data.strip()
        if not raw:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        parts = raw.split(maxsplit=1)
        command_name = parts[0].upper()
        rest = parts[1] if len(parts) > 1 else ""

        if command_name in ("BROWSE", "DELETE"):
            return self._parse_filtered(CommandType[command_name], rest, raw)
        if command_name == "CREATE":
            return self._parse_create(rest, raw)
        if command_name in ("SELECT", "REMOVE"):
            return self._parse_keyed(CommandType[command_name], rest, raw)
        if command_name in ("UPDATE", "MODIFY"):
            return self._parse_keyed_payload(CommandType[command_name], rest, raw)
        if command_name == "QUIT":
            # QUIT takes no args
            if not rest:
                return Command(type=CommandType.QUIT, raw=raw)
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=CommandType.UNKNOWN, raw=raw)

    def _parse_params(self, rest: str) -> Optional[Dict[str, str]]:
        """
        Parse filter parameters.

        Format: field=value [field=value ...]

        Returns:
            Parameter dict (later duplicates win), or None if a token is malformed
        """
        params = {}
        for token in rest.split():
            name, sep, value = token.partition("=")
            if not name or not sep:
                return None
            params[name] = value
        return params

    def _parse_filtered(self, command_type: CommandType, rest: str, raw: str) -> Command:
        """
        Parse a BROWSE or DELETE command.

        Format: BROWSE|DELETE [field=value ...]
        """
        params = self._parse_params(rest)
        if params is None:
            return Command(type=CommandType.UNKNOWN, raw=raw)
        return Command(type=command_type, params=params, raw=raw)

    def _parse_create(self, rest: str, raw: str) -> Command:
        """
        Parse a CREATE command.

        Format: CREATE <json>
        """
        if not rest or len(rest) > self.max_payload_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)
        return Command(type=CommandType.CREATE, payload=rest, raw=raw)

    def _parse_keyed(self, command_type: CommandType, rest: str, raw: str) -> Command:
        """
        Parse a SELECT or REMOVE command.

        Format: SELECT|REMOVE <key>
        """
        parts = rest.split()
        if len(parts) != 1:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key = parts[0]
        if len(key) > self.max_key_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=command_type, key=key, raw=raw)

    def _parse_keyed_payload(self, command_type: CommandType, rest: str, raw: str) -> Command:
        """
        Parse an UPDATE or MODIFY command.

        Format: UPDATE|MODIFY <key> <json>
        """
        parts = rest.split(maxsplit=1)
        if len(parts) != 2:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key, payload = parts
        if len(key) > self.max_key_length or len(payload) > self.max_payload_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=command_type, key=key, payload=payload, raw=raw)

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Args:
            response: Response object to format

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.ok(value='{"key":"0"}'))
            'OK {"key":"0"}\\n'
            >>> parser.format_response(Response.error("key '9' does not exist", code="key_missing"))
            "ERROR key_missing key '9' does not exist\\n"
            >>> parser.format_response(Response.invalid_command())
            'ERROR invalid command\\n'
        """
        prefix = response.status.value

        # If value is provided, prefer it; otherwise use message
        if response.value is not None:
            body = response.value
        else:
            body = response.message

        if response.code:
            body = f"{response.code} {body}" if body else response.code

        # Ensure empty body still results in newline-terminated string
        if body:
            return f"{prefix} {body}\n"
        return f"{prefix}\n"
