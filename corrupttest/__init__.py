"""
corrupttest - fault-injection harness for write-path consistency safeguards.

Enumerates a space of table schemas, runs fixed transactional workloads
against each while one mutation corruption is injected through a failpoint,
and classifies whether the mutation checker or transaction assertions
caught it:
- success: a safeguard rejected the write
- other_error: the workload failed for an unrelated reason
- failure: the write went through; admin check table found the damage
- consistent: the injection left no trace
"""

__version__ = "0.3.0"

from corrupttest.config import Settings, get_settings

__all__ = ["__version__", "Settings", "get_settings"]
