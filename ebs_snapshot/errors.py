class SnapshotAutomationError(RuntimeError):
    """Base class for errors raised by the snapshot automation."""


class ConfigurationError(SnapshotAutomationError):
    """Raised when a configuration value is missing or invalid."""


class DependencyError(SnapshotAutomationError):
    """Raised when a required external capability is not available."""


class IdentityError(SnapshotAutomationError):
    """Raised when the instance identity cannot be resolved."""


class AuditLogError(SnapshotAutomationError):
    """Raised when the audit log destination cannot be used."""


class ExpirationError(SnapshotAutomationError):
    def __init__(self, snapshot_id, reason):
        reason = str(reason).strip() or "unknown error"
        super().__init__(f"failed to delete snapshot {snapshot_id}: {reason}")
        self.snapshot_id = snapshot_id
