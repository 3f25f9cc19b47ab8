# Input defaults
DEFAULT_INPUT_TYPE = "stdin"

# Server defaults
DEFAULT_PROTOCOL = "http"
DEFAULT_PORT = 9144  # registered for grok_exporter on the Prometheus port wiki

# Rendered instead of the YAML dump when the encoder fails
MARSHAL_ERROR_TEMPLATE = "ERROR: Failed to marshal config: {error}"
