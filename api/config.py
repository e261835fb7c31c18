"""Service configuration from environment variables."""

import os

ES_URL: str = os.getenv("ES_URL", "http://elasticsearch:9200")
KIBANA_URL: str = os.getenv("KIBANA_URL", "http://kibana:5601")
FILTER_DB_URL: str = os.getenv("FILTER_DB_URL", "sqlite:///data/filters.db")
DEFAULT_OPTIONS_SIZE: int = int(os.getenv("DEFAULT_OPTIONS_SIZE", "5"))
