# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Runtime configuration read from the environment and an optional .env file.
"""
import os
from typing import Dict, Optional
from dotenv import dotenv_values
from pydantic import BaseModel

from .RUNTIME.lxc_driver import DEFAULT_LXC_PATH

ENV_PREFIX = "NUT_"


class NutConfig(BaseModel):
    """
    Settings for the builder and its LXC driver.
    """
    lxc_path: str = DEFAULT_LXC_PATH
    log_level: str = "INFO"
    start_timeout: float = 30.0
    volume: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "NutConfig":
        """
        Builds a configuration from ``NUT_*`` variables.

        Values in ``env_file`` override the process environment.

        :param env_file: Optional path to a .env file.
        :param environ: Environment to read instead of ``os.environ``.
        """
        values = dict(os.environ if environ is None else environ)
        if env_file and os.path.exists(env_file):
            values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

        settings = {}
        for field in cls.model_fields:
            key = ENV_PREFIX + field.upper()
            if key in values:
                settings[field] = values[key]
        return cls(**settings)
