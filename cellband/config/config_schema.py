"""JSON Schema validation for Cell Band Inspector configuration."""

import copy
from typing import List, Tuple, Dict, Any

import jsonschema
from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config({"serial": {"default_baud": 12345}})
        >>> is_valid
        False
    """

    VALID_BAUD_RATES = [9600, 19200, 38400, 57600, 115200, 230400, 460800, 921600]

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "Cell Band Inspector Configuration",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "description": "Modem AT port settings",
                    "properties": {
                        "port": {
                            "type": ["string", "null"],
                            "description": "AT port device path"
                        },
                        "default_baud": {
                            "type": "integer",
                            "enum": ConfigSchema.VALID_BAUD_RATES
                        },
                        "timeout": {
                            "type": "integer",
                            "description": "Command timeout in seconds",
                            "minimum": 1,
                            "maximum": 300
                        },
                        "retry_attempts": {
                            "type": "integer",
                            "minimum": 0,
                            "maximum": 10
                        },
                        "retry_delay": {
                            "type": "integer",
                            "description": "Delay between retries in milliseconds",
                            "minimum": 100,
                            "maximum": 10000
                        }
                    },
                    "additionalProperties": False
                },
                "telemetry": {
                    "type": "object",
                    "description": "Band telemetry extraction settings",
                    "properties": {
                        "min_response_length": {
                            "type": "integer",
                            "description": "Replies this long or shorter carry no data",
                            "minimum": 0,
                            "maximum": 4095
                        },
                        "dbus_destination": {
                            "type": "string",
                            "minLength": 1
                        },
                        "dbus_object_path": {
                            "type": "string",
                            "pattern": "^/.*"
                        },
                        "oracle_timeout": {
                            "type": "integer",
                            "description": "dbus-send timeout in seconds",
                            "minimum": 1,
                            "maximum": 60
                        }
                    },
                    "additionalProperties": False
                },
                "logging": {
                    "type": "object",
                    "description": "AT traffic logging settings",
                    "properties": {
                        "enabled": {"type": "boolean"},
                        "level": {
                            "type": "string",
                            "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]
                        },
                        "log_to_file": {"type": "boolean"},
                        "log_to_console": {"type": "boolean"},
                        "log_file_path": {"type": ["string", "null"]},
                        "max_file_size_mb": {
                            "type": "integer",
                            "minimum": 1,
                            "maximum": 1000
                        },
                        "backup_count": {
                            "type": "integer",
                            "minimum": 0,
                            "maximum": 100
                        }
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config: Dict[str, Any], strict: bool = True) -> Tuple[bool, List[str]]:
        """Validate a configuration dictionary.

        Args:
            config: Configuration dictionary to validate
            strict: Reject unknown fields when True

        Returns:
            (is_valid, error_messages)
        """
        schema = ConfigSchema.get_schema()
        if not strict:
            schema = ConfigSchema._make_permissive(schema)

        validator = Draft7Validator(schema)
        errors = [ConfigSchema._format_error(error) for error in validator.iter_errors(config)]
        errors.extend(ConfigSchema._custom_validation(config))

        return len(errors) == 0, errors

    @staticmethod
    def _make_permissive(schema: Dict[str, Any]) -> Dict[str, Any]:
        permissive_schema = copy.deepcopy(schema)

        def remove_additional_properties(obj):
            if isinstance(obj, dict):
                obj.pop("additionalProperties", None)
                for value in obj.values():
                    remove_additional_properties(value)

        remove_additional_properties(permissive_schema)
        return permissive_schema

    @staticmethod
    def _format_error(error: jsonschema.exceptions.ValidationError) -> str:
        """Render a ValidationError as "Section 's', field 'f': ..."."""
        path_parts = list(error.path)
        if len(path_parts) == 0:
            section, field = "root", "configuration"
        elif len(path_parts) == 1:
            section, field = path_parts[0], "section"
        else:
            section = path_parts[0]
            field = ".".join(str(p) for p in path_parts[1:])

        prefix = f"Section '{section}', field '{field}'"

        if error.validator == "type":
            return (f"{prefix}: Expected type {error.validator_value}, "
                    f"got {type(error.instance).__name__} (value: {error.instance})")
        elif error.validator == "enum":
            return f"{prefix}: Expected one of {error.validator_value}, got {error.instance}"
        elif error.validator == "minimum":
            return f"{prefix}: Value must be >= {error.validator_value}, got {error.instance}"
        elif error.validator == "maximum":
            return f"{prefix}: Value must be <= {error.validator_value}, got {error.instance}"
        elif error.validator == "additionalProperties":
            extra_props = set(error.instance.keys()) - set(error.schema.get('properties', {}).keys())
            return f"Section '{section}': Unknown fields {sorted(extra_props)} not allowed"

        return f"{prefix}: {error.message}"

    @staticmethod
    def _custom_validation(config: Dict[str, Any]) -> List[str]:
        errors = []

        logging_section = config.get("logging")
        if isinstance(logging_section, dict):
            path = logging_section.get("log_file_path")
            if path is not None and not ConfigSchema.validate_path(path):
                errors.append(
                    f"Section 'logging', field 'log_file_path': Path {path!r} "
                    f"contains invalid characters"
                )

        serial_section = config.get("serial")
        if isinstance(serial_section, dict):
            port = serial_section.get("port")
            if port is not None and not ConfigSchema.validate_path(port):
                errors.append(f"Section 'serial', field 'port': Port {port!r} is not a valid device name")

        return errors

    @staticmethod
    def validate_path(path: str) -> bool:
        """Reject empty, whitespace-only or control-character paths."""
        if not isinstance(path, str) or not path.strip():
            return False
        return not any(char in path for char in ('\0', '\r', '\n'))
