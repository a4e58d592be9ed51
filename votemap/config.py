import os
from dataclasses import dataclass
from enum import Enum

import yaml

import votemap


class Environments(Enum):
    TEST = 'test'
    LOCAL = 'local'
    DEV = 'dev'
    PROD = 'prod'


@dataclass
class Config:
    environment: Environments
    api_base_url: str
    timeout_seconds: float
    max_concurrent_requests: int
    log_level: str

    def __init__(self, conf_data, environment: Environments):
        self.environment = environment
        api = conf_data['api']
        self.api_base_url = os.environ.get("VOTEMAP_API_BASE_URL", api['base_url']).rstrip("/")
        self.timeout_seconds = float(api.get('timeout_seconds', 30))
        self.max_concurrent_requests = int(api.get('max_concurrent_requests', 4))
        self.log_level = os.environ.get("LOG_LEVEL", conf_data.get('logging', {}).get('level', 'WARNING'))

    def initial_data_url(self):
        return f"{self.api_base_url}/initial-data"

    def vote_events_url(self, vote_id: int):
        return f"{self.api_base_url}/vote-events/{vote_id}"


def _create_config(environment: Environments):
    env_yaml = os.path.join(os.path.dirname(votemap.__file__), f"../environments/{environment.value}.yaml")
    with open(env_yaml, 'r', encoding='utf-8') as fp:
        conf_data = yaml.safe_load(fp)

    return Config(conf_data, environment)


def create_config_from_env():
    return _create_config(Environments(os.environ.get('VOTEMAP_ENVIRONMENT', Environments.LOCAL.value)))
