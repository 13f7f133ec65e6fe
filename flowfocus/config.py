# FlowFocus — configuration
# Override paths and behaviour via flowfocus.yaml, environment or CLI args.

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

from .coordinator import UpdatePolicy
from .gateway import InMemoryTaskGateway
from .notify import CollectingNotifier, FanoutNotifier, LoggingNotifier, WebhookNotifier
from .sqlite_gateway import SqliteTaskGateway

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "flowfocus" / "flowfocus.yaml"

GATEWAYS = ("sqlite", "memory")


@dataclass
class BoardConfig:
    """Runtime configuration for the task board."""

    # Persistence
    gateway: str = "sqlite"                       # "sqlite" | "memory"
    db_path: str = "~/.local/share/flowfocus/tasks.db"
    latency_ms: int = 0                           # in-memory gateway only

    # Notifications
    webhook_url: Optional[str] = None             # None = log only
    webhook_timeout: float = 2.0

    # Behaviour
    update_policy: str = UpdatePolicy.LAST_RESPONSE_WINS.value
    log_level: str = "INFO"

    def resolve(self) -> "BoardConfig":
        """Apply environment overrides, expand ~ and validate choices."""
        env_db = os.environ.get("FLOWFOCUS_DB")
        if env_db:
            self.db_path = env_db
        env_hook = os.environ.get("FLOWFOCUS_WEBHOOK")
        if env_hook:
            self.webhook_url = env_hook

        self.db_path = str(Path(self.db_path).expanduser())

        if self.gateway not in GATEWAYS:
            logger.warning(f"Unknown gateway '{self.gateway}', using sqlite")
            self.gateway = "sqlite"
        try:
            UpdatePolicy(self.update_policy)
        except ValueError:
            logger.warning(f"Unknown update_policy '{self.update_policy}', using last_response_wins")
            self.update_policy = UpdatePolicy.LAST_RESPONSE_WINS.value
        return self

    @property
    def policy(self) -> UpdatePolicy:
        return UpdatePolicy(self.update_policy)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path).expanduser() if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                known = {f.name for f in fields(cls)}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logger.warning(f"Cannot read config {cfg_path}: {e}; using defaults")
                cfg = cls()
        else:
            cfg = cls()
        return cfg.resolve()

    # ── Collaborator factories ───────────────────────────────

    def build_gateway(self):
        if self.gateway == "memory":
            return InMemoryTaskGateway(latency=self.latency_ms / 1000)
        return SqliteTaskGateway(self.db_path)

    def build_notifier(self, collector: Optional[CollectingNotifier] = None):
        """Log sink, wrapped by the webhook sink when a URL is configured."""
        sink = LoggingNotifier()
        if self.webhook_url:
            sink = WebhookNotifier(self.webhook_url, fallback=sink, timeout=self.webhook_timeout)
        if collector is not None:
            return FanoutNotifier(sink, collector)
        return sink
