# Copyright 2022 AI Singapore
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

"""Runtime configuration of the language server process."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .utils.logging_utils import configure_server_logging


@dataclass
class ServerConfig:
    """Configuration class for the language server process."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    # Delay between a save and the validation it triggers
    validation_delay_ms: int = 200
    max_problems: int = 100

    @classmethod
    def from_env(cls) -> 'ServerConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('PEEKINGDUCK_LS_LOG_LEVEL', 'INFO'),
            log_file=os.getenv('PEEKINGDUCK_LS_LOG_FILE') or None,
            validation_delay_ms=int(os.getenv('PEEKINGDUCK_LS_VALIDATION_DELAY_MS', '200')),
            max_problems=int(os.getenv('PEEKINGDUCK_LS_MAX_PROBLEMS', '100')),
        )

    @property
    def validation_delay(self) -> float:
        """Validation delay in seconds."""
        return self.validation_delay_ms / 1000.0

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        configure_server_logging(level=level, log_file=self.log_file, formatter=formatter)

        return logging.getLogger('peekingduck_language_server')


# Global configuration instance
server_config = ServerConfig.from_env()
