"""Environment-driven settings for the bootstrap run.

``BootstrapConfig`` names the secrets and the RDS host to provision against;
``SecretsConfig`` says where Secrets Manager lives (region, optional local
endpoint). Import both from here rather than from their modules.
"""

from app.services.config.bootstrap_config import BootstrapConfig
from app.services.config.secrets_config import SecretsConfig

__all__ = ["BootstrapConfig", "SecretsConfig"]
