"""
Configuration Serialization Support

Converts a TopologyConfig to and from a flat attribute document, and the
document to and from JSON or YAML text.

Document layout:
    threads: 4
    nettyThreads: 0
    codec: {class: kvconfig.codec.codecs.JsonCodec}
    codecProvider: {class: kvconfig.codec.provider.DefaultCodecProvider}
    resolverProvider: {class: kvconfig.resolver.DefaultResolverProvider}
    referenceFeatureEnabled: true
    useNativeTransport: false
    sentinelServersConfig:          # exactly one topology key
      masterName: mymaster
      sentinelAddresses: [...]

Stateless strategy objects (codec and providers) are stored as class
references and re-created with no arguments on load. The executor and the
shared event loop are runtime resources and are never written.
"""

import importlib
import inspect
import json
import logging
import os
import re
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union, get_args, get_origin, get_type_hints

import requests
import yaml

from ..codec.codecs import Codec
from ..codec.provider import CodecProvider
from ..exceptions import ConfigParseError
from ..resolver import ResolverProvider
from ..servers.base import BaseConfig
from ..servers.kinds import TopologyKind
from .settings import settings

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://\S+$")

CLASS_KEY = "class"

# document key -> (attribute, type)
SCALAR_FIELDS: Dict[str, Tuple[str, type]] = {
    "threads": ("threads", int),
    "nettyThreads": ("netty_threads", int),
    "referenceFeatureEnabled": ("reference_feature_enabled", bool),
    "useNativeTransport": ("use_native_transport", bool),
}

# document key -> (attribute, required base class)
STRATEGY_FIELDS: Dict[str, Tuple[str, type]] = {
    "codec": ("codec", Codec),
    "codecProvider": ("codec_provider", CodecProvider),
    "resolverProvider": ("resolver_provider", ResolverProvider),
}

TOPOLOGY_KEYS = {kind.key: kind for kind in TopologyKind}


class ConfigFormat(Enum):
    """Text formats a configuration can be stored in."""
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_name(cls, name: str) -> "ConfigFormat":
        """Look up a format by name (case-insensitive); ``yml`` is accepted."""
        normalized = name.strip().lower()
        if normalized == "yml":
            normalized = "yaml"
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown config format: {name!r}") from None

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], default: Optional["ConfigFormat"] = None) -> "ConfigFormat":
        """Guess a format from a file suffix, falling back to the default."""
        suffix = Path(path).suffix.lstrip(".")
        if suffix:
            try:
                return cls.from_name(suffix)
            except ValueError:
                pass
        if default is not None:
            return default
        return cls.from_name(settings.DEFAULT_FORMAT)


# ============================================================================
# Naming
# ============================================================================

def camel_case(name: str) -> str:
    """Convert a snake_case attribute name to its camelCase document key."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def class_path(obj: Any) -> str:
    """Return the importable dotted path of an object's class."""
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def is_trusted_module(module_name: str) -> bool:
    """Check a module name against settings.TRUSTED_MODULE_PREFIXES (empty = any)."""
    prefixes = settings.TRUSTED_MODULE_PREFIXES
    if not prefixes:
        return True
    return any(
        module_name == prefix.rstrip(".") or module_name.startswith(prefix.rstrip(".") + ".")
        for prefix in prefixes
    )


def load_class_reference(value: Any, base: type, key: str) -> Any:
    """
    Instantiate a strategy object from its ``{class: dotted.path}`` form.

    The named module is imported before the class is checked, so its
    import-time code runs. Set ``settings.TRUSTED_MODULE_PREFIXES`` to limit
    which modules a document may name.

    Raises:
        ConfigParseError: If the reference is malformed, names a module
            outside the trusted prefixes, cannot be imported, names an
            abstract class or one that is not a subclass of ``base``, or the
            class cannot be created without arguments
    """
    if not isinstance(value, dict) or set(value) != {CLASS_KEY} or not isinstance(value[CLASS_KEY], str):
        raise ConfigParseError(f"{key}: expected a mapping with a single '{CLASS_KEY}' key")

    dotted = value[CLASS_KEY]
    module_name, _, class_name = dotted.rpartition(".")
    if not module_name:
        raise ConfigParseError(f"{key}: invalid class reference {dotted!r}")
    if not is_trusted_module(module_name):
        raise ConfigParseError(f"{key}: module {module_name!r} is not allowed")
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ConfigParseError(f"{key}: cannot import {dotted!r}: {exc}") from exc

    if not isinstance(cls, type) or not issubclass(cls, base):
        raise ConfigParseError(f"{key}: {dotted!r} is not a {base.__name__}")
    if inspect.isabstract(cls):
        raise ConfigParseError(f"{key}: {dotted!r} is abstract")
    try:
        return cls()
    except TypeError as exc:
        raise ConfigParseError(f"{key}: cannot instantiate {dotted!r}: {exc}") from exc


# ============================================================================
# Value conversion
# ============================================================================

def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", str(hint))


def coerce_value(value: Any, hint: Any, key: str) -> Any:
    """
    Check a document value against a type hint and convert it.

    Lists become sets where the hint asks for a set, and enum names become
    enum members.

    Raises:
        ConfigParseError: If the value does not match the hint
    """
    origin = get_origin(hint)

    if origin is Union:
        if value is None:
            return None
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        return coerce_value(value, members[0], key)

    if origin in (list, set):
        if not isinstance(value, list):
            raise ConfigParseError(f"{key}: expected a list, got {type(value).__name__}")
        (item_hint,) = get_args(hint)
        items = [coerce_value(item, item_hint, f"{key}[{i}]") for i, item in enumerate(value)]
        return origin(items)

    if isinstance(hint, type) and issubclass(hint, Enum):
        if not isinstance(value, str) or value not in hint.__members__:
            choices = ", ".join(hint.__members__)
            raise ConfigParseError(f"{key}: expected one of {choices}, got {value!r}")
        return hint[value]

    # bool is a subclass of int, so it must never pass as a number
    if hint is int and (not isinstance(value, int) or isinstance(value, bool)):
        raise ConfigParseError(f"{key}: expected int, got {type(value).__name__}")
    if hint in (bool, str) and not isinstance(value, hint):
        raise ConfigParseError(f"{key}: expected {_type_name(hint)}, got {type(value).__name__}")
    return value


def _dump_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, set):
        return sorted(value)
    if isinstance(value, list):
        return list(value)
    return value


# ============================================================================
# Server configs
# ============================================================================

def server_config_to_dict(server_config: BaseConfig) -> Dict[str, Any]:
    """Convert a server config into its document form."""
    return {
        camel_case(f.name): _dump_value(getattr(server_config, f.name))
        for f in fields(server_config)
    }


def server_config_from_dict(kind: TopologyKind, document: Any) -> BaseConfig:
    """
    Build the server config for a topology from its document form.

    Keys missing from the document keep their defaults.

    Raises:
        ConfigParseError: On unknown keys, wrong value types, or values the
            server config rejects
    """
    if not isinstance(document, dict):
        raise ConfigParseError(f"{kind.key}: expected a mapping, got {type(document).__name__}")

    cls = kind.config_class
    hints = get_type_hints(cls)
    by_key = {camel_case(f.name): f.name for f in fields(cls)}

    unknown = sorted(set(document) - set(by_key), key=str)
    if unknown:
        raise ConfigParseError(f"{kind.key}: unknown field(s): {', '.join(map(str, unknown))}")

    kwargs = {
        by_key[key]: coerce_value(value, hints[by_key[key]], f"{kind.key}.{key}")
        for key, value in document.items()
    }
    try:
        return cls(**kwargs)
    except ValueError as exc:
        raise ConfigParseError(f"{kind.key}: {exc}") from exc


# ============================================================================
# Whole config
# ============================================================================

def to_dict(config) -> Dict[str, Any]:
    """Convert a TopologyConfig into its document form."""
    document: Dict[str, Any] = {
        "threads": config.threads,
        "nettyThreads": config.netty_threads,
    }
    for key, (attribute, _) in STRATEGY_FIELDS.items():
        value = getattr(config, attribute)
        if value is not None:
            document[key] = {CLASS_KEY: class_path(value)}
    document["referenceFeatureEnabled"] = config.reference_feature_enabled
    document["useNativeTransport"] = config.use_native_transport

    if config.topology is not None:
        document[config.topology.key] = server_config_to_dict(config.server_config)
    return document


def from_dict(document: Any, config_cls):
    """
    Build a config of class ``config_cls`` from its document form.

    The document is validated completely before a config is returned:
    unknown keys, wrong types and more than one populated topology are
    all rejected.

    Raises:
        ConfigParseError: If the document does not describe a valid config
    """
    if not isinstance(document, dict):
        raise ConfigParseError(f"Expected a mapping at the top level, got {type(document).__name__}")

    known = set(SCALAR_FIELDS) | set(STRATEGY_FIELDS) | set(TOPOLOGY_KEYS)
    unknown = sorted(set(document) - known, key=str)
    if unknown:
        raise ConfigParseError(f"Unknown field(s): {', '.join(map(str, unknown))}")

    populated = [kind for key, kind in TOPOLOGY_KEYS.items() if document.get(key) is not None]
    if len(populated) > 1:
        keys = ", ".join(kind.key for kind in populated)
        raise ConfigParseError(f"Only one topology may be configured, found: {keys}")

    config = config_cls()
    for key, (attribute, hint) in SCALAR_FIELDS.items():
        if key in document:
            value = coerce_value(document[key], hint, key)
            if hint is int and value < 0:
                raise ConfigParseError(f"{key}: must be non-negative, got {value}")
            setattr(config, attribute, value)

    for key, (attribute, base) in STRATEGY_FIELDS.items():
        if document.get(key) is not None:
            setattr(config, attribute, load_class_reference(document[key], base, key))

    if populated:
        kind = populated[0]
        config.select_topology(kind, server_config_from_dict(kind, document[kind.key]))
    return config


# ============================================================================
# Text
# ============================================================================

def parse_text(text: str, fmt: ConfigFormat) -> Any:
    """
    Parse JSON or YAML text into a document.

    Raises:
        ConfigParseError: With the parser's message and position on
            syntax errors, or if the document is nested too deeply
    """
    if fmt is ConfigFormat.JSON:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(exc.msg, exc.lineno, exc.colno) from exc
        except RecursionError as exc:
            raise ConfigParseError("Document nested too deeply") from exc

    try:
        return yaml.safe_load(text)
    except RecursionError as exc:
        raise ConfigParseError("Document nested too deeply") from exc
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        message = getattr(exc, "problem", None) or str(exc)
        if mark is not None:
            raise ConfigParseError(message, mark.line + 1, mark.column + 1) from exc
        raise ConfigParseError(message) from exc


def render_document(document: Dict[str, Any], fmt: ConfigFormat) -> str:
    """Render a document as JSON or YAML text."""
    if fmt is ConfigFormat.JSON:
        return json.dumps(document, indent=settings.JSON_INDENT) + "\n"
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)


def read_source(source: Any) -> Tuple[Union[str, bytes], str]:
    """
    Read raw configuration content from any supported source.

    Args:
        source: One of
            - ``os.PathLike``: a file path
            - ``bytes``: raw content
            - ``str``: text content, or a single http(s) URL to fetch
            - any object with ``read()``: a text or binary stream

    Returns:
        Tuple of (content, description of the source)

    Raises:
        OSError: If a file or stream cannot be read
        requests.RequestException: If a URL cannot be fetched
        TypeError: If the source is of an unsupported type
    """
    if isinstance(source, os.PathLike):
        path = Path(source)
        return path.read_bytes(), str(path)
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), "<bytes>"
    if isinstance(source, str):
        if URL_PATTERN.match(source):
            logger.debug(f"Fetching configuration from {source}")
            response = requests.get(source)
            response.raise_for_status()
            return response.content, source
        return source, "<string>"
    if hasattr(source, "read"):
        return source.read(), str(getattr(source, "name", "<stream>"))
    raise TypeError(f"Unsupported configuration source: {type(source).__name__}")


def load_config(source: Any, fmt: ConfigFormat, config_cls):
    """
    Read, parse and validate a configuration.

    Args:
        source: Anything accepted by read_source()
        fmt: Format of the content
        config_cls: Class of the config to build

    Returns:
        A new config instance

    Raises:
        ConfigParseError: If the content is not a valid configuration
    """
    content, description = read_source(source)
    try:
        if isinstance(content, bytes):
            try:
                content = content.decode(settings.ENCODING)
            except UnicodeDecodeError as exc:
                raise ConfigParseError(f"Content is not valid {settings.ENCODING}: {exc.reason}") from exc
        # a leading byte order mark is not part of the document
        content = content[1:] if content.startswith("\ufeff") else content
        config = from_dict(parse_text(content, fmt), config_cls)
    except ConfigParseError as exc:
        raise exc.with_source(description) from exc

    logger.debug(f"Loaded {fmt.value} configuration from {description} (topology: {config.topology})")
    return config


def dump_config(config, fmt: ConfigFormat) -> str:
    """Render a config as JSON or YAML text."""
    return render_document(to_dict(config), fmt)
