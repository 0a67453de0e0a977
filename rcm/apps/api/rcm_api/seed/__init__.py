"""Admin seed configuration (demo records, tenants, default actor)."""

from .loader import SeedConfigLoader, get_seed_loader, load_seed_config
from .models import DemoUser, DependentTable, DomainConfig, SeedConfig, TenantConfig

__all__ = [
    "DemoUser",
    "DependentTable",
    "DomainConfig",
    "SeedConfig",
    "SeedConfigLoader",
    "TenantConfig",
    "get_seed_loader",
    "load_seed_config",
]
