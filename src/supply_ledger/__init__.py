"""Supply chain product registry as a deterministic ledger contract."""

__version__ = "0.1.0"
