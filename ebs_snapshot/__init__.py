"""Automated EBS snapshot creation and clean-up for the local EC2 instance."""

__version__ = "0.1.0"

CREATED_BY_TAG = "CreatedBy"
CREATED_BY_VALUE = "AutomatedBackup"
