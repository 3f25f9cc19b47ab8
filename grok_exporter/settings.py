"""Configuration model for grok_exporter.

A YAML document is parsed into these models with every absent field left at
its zero value (empty string, zero, False or None). ``Config.with_defaults()``
fills the unset slots and ``Config.check()`` enforces the cross-field rules,
stopping at the first violation.

Models are frozen: defaulting returns new instances, so a checked ``Config``
can be shared read-only by the input reader, the grok engine, the metrics
registry and the HTTP server.
"""

import datetime
from typing import Annotated, Literal, get_args

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict

from grok_exporter import constants
from grok_exporter.errors import ConfigValidationError

InputType = Literal["stdin", "file"]
MetricType = Literal["counter"]
Protocol = Literal["http", "https"]

# Numbers such as `name: 404` are accepted as text, unknown keys are ignored
_MODEL_CONFIG = ConfigDict(frozen=True, coerce_numbers_to_str=True)


def _scalar_to_text(value):
    """Turn YAML 1.1 booleans and timestamps back into text.

    PyYAML resolves `yes`, `true` or `2020-01-01` before the model sees
    them, so the original spelling is lost: booleans become `true`/`false`
    and timestamps their ISO form.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


Text = Annotated[str, BeforeValidator(_scalar_to_text)]


class InputConfig(BaseModel):
    """Where log lines are read from."""

    model_config = _MODEL_CONFIG

    type: Text = ""
    path: Text = ""
    readall: bool = False

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    def with_defaults(self) -> "InputConfig":
        if self.type:
            return self
        return self.model_copy(update={"type": constants.DEFAULT_INPUT_TYPE})

    def check(self) -> None:
        if self.type not in get_args(InputType):
            raise ConfigValidationError(
                f"Unsupported 'input.type': {self.type}", field="input.type"
            )
        if self.type == "stdin" and self.path:
            raise ConfigValidationError(
                "Cannot use 'input.path' when 'input.type' is stdin.",
                field="input.path",
            )
        if self.type == "file" and not self.path:
            raise ConfigValidationError(
                "'input.path' is required for input type \"file\".",
                field="input.path",
            )


class GrokConfig(BaseModel):
    """Sources of grok pattern definitions.

    There are no implicit patterns: either a directory of pattern files or
    a list of inline patterns has to be configured.
    """

    model_config = _MODEL_CONFIG

    patterns_dir: Text = ""
    patterns: list[Text] | None = None

    def with_defaults(self) -> "GrokConfig":
        return self

    def check(self) -> None:
        if not self.patterns_dir and not self.patterns:
            raise ConfigValidationError(
                "No patterns defined: One of 'grok.patterns_dir' and "
                "'grok.patterns' must be configured.",
                field="grok",
            )


class LabelConfig(BaseModel):
    """Maps a field extracted by grok to a Prometheus label."""

    model_config = _MODEL_CONFIG

    grok_field_name: Text = ""
    prometheus_label: Text = ""

    def check(self) -> None:
        for field in ("grok_field_name", "prometheus_label"):
            if not getattr(self, field):
                raise ConfigValidationError(
                    f"'metrics.labels.{field}' must not be empty.",
                    field=f"metrics.labels.{field}",
                )


class MetricConfig(BaseModel):
    """A single metric driven by one grok match pattern."""

    model_config = _MODEL_CONFIG

    type: Text = ""
    name: Text = ""
    help: Text = ""
    match: Text = ""
    # An empty list is legal, a missing one is not
    labels: list[LabelConfig] | None = None

    def check(self) -> None:
        """Check this metric and its label mappings.

        Raises:
            ConfigValidationError: On the first rule that does not hold
        """
        if self.type not in get_args(MetricType):
            raise ConfigValidationError(
                f"Invalid 'metrics.type': '{self.type}'. "
                "We currently only support 'counter'.",
                field="metrics.type",
            )
        for field in ("name", "help", "match"):
            if not getattr(self, field):
                raise ConfigValidationError(
                    f"'metrics.{field}' must not be empty.", field=f"metrics.{field}"
                )
        if self.labels is None:
            raise ConfigValidationError(
                "Cannot find 'metrics.labels' configuration.", field="metrics.labels"
            )
        for label in self.labels:
            label.check()


def check_metrics(metrics: list[MetricConfig]) -> None:
    """Check the metrics section as a whole.

    Names are registered in list order, so the error names the second
    occurrence of a duplicate. Each metric is checked right after its name
    has been registered.

    Args:
        metrics: Metric definitions in configuration order

    Raises:
        ConfigValidationError: If the list is empty, a name repeats or a
            metric is invalid
    """
    if not metrics:
        raise ConfigValidationError("'metrics' must not be empty.", field="metrics")
    seen: set[str] = set()
    for metric in metrics:
        if metric.name in seen:
            raise ConfigValidationError(
                f"{metric.name} defined twice.", field="metrics.name"
            )
        seen.add(metric.name)
        metric.check()


class ServerConfig(BaseModel):
    """Endpoint the metrics are exposed on."""

    model_config = _MODEL_CONFIG

    protocol: Text = ""
    port: int = 0
    cert: Text = ""
    key: Text = ""

    @property
    def uses_tls(self) -> bool:
        return self.protocol == "https"

    @property
    def has_tls_material(self) -> bool:
        """True when both certificate and key files are configured."""
        return bool(self.cert and self.key)

    def with_defaults(self) -> "ServerConfig":
        update: dict[str, str | int] = {}
        if not self.protocol:
            update["protocol"] = constants.DEFAULT_PROTOCOL
        if self.port == 0:
            update["port"] = constants.DEFAULT_PORT
        return self.model_copy(update=update) if update else self

    def check(self) -> None:
        if self.protocol not in get_args(Protocol):
            raise ConfigValidationError(
                f"Invalid 'server.protocol': '{self.protocol}'. "
                "Expecting 'http' or 'https'.",
                field="server.protocol",
            )
        if self.port <= 0:
            raise ConfigValidationError(
                f"Invalid 'server.port': '{self.port}'.", field="server.port"
            )
        if self.protocol == "https":
            if self.cert and not self.key:
                raise ConfigValidationError(
                    "'server.cert' must not be specified without 'server.key'",
                    field="server.cert",
                )
            if self.key and not self.cert:
                raise ConfigValidationError(
                    "'server.key' must not be specified without 'server.cert'",
                    field="server.key",
                )
        elif self.cert or self.key:
            raise ConfigValidationError(
                "'server.cert' and 'server.key' can only be configured "
                "for protocol 'https'.",
                field="server.cert" if self.cert else "server.key",
            )


class Config(BaseModel):
    """grok_exporter configuration loaded from a YAML file.

    Sections missing from the file are None until ``with_defaults()`` has
    been applied; afterwards all four are present.
    """

    model_config = _MODEL_CONFIG

    input: InputConfig | None = None
    grok: GrokConfig | None = None
    metrics: list[MetricConfig] | None = None
    server: ServerConfig | None = None

    @property
    def metric_names(self) -> list[str]:
        return [metric.name for metric in self.metrics or []]

    def with_defaults(self) -> "Config":
        """Return a copy with every unset section and field defaulted.

        Explicitly configured values are never overwritten, so applying
        this twice gives the same result as applying it once.
        """
        return self.model_copy(
            update={
                "input": (self.input or InputConfig()).with_defaults(),
                "grok": (self.grok or GrokConfig()).with_defaults(),
                "metrics": self.metrics if self.metrics is not None else [],
                "server": (self.server or ServerConfig()).with_defaults(),
            }
        )

    def check(self) -> None:
        """Check the defaulted configuration.

        Sections are checked in the order input, grok, metrics, server and
        the first violated rule is raised.

        Raises:
            ConfigValidationError: On the first rule that does not hold
        """
        for section in ("input", "grok", "metrics", "server"):
            if getattr(self, section) is None:
                raise ConfigValidationError(
                    f"Missing '{section}' section, defaults have not been applied.",
                    field=section,
                )
        self.input.check()
        self.grok.check()
        check_metrics(self.metrics)
        self.server.check()

    def to_yaml(self) -> str:
        """Render the configuration as YAML for diagnostics.

        Fields holding their zero value are left out. Encoder failures are
        returned as an error string instead of being raised.
        """
        try:
            data = self.model_dump(mode="json", exclude_defaults=True)
            return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            return constants.MARSHAL_ERROR_TEMPLATE.format(error=e)

    def __str__(self) -> str:
        return self.to_yaml()
