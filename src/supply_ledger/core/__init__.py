"""Core types shared by the contract, the storage backends and the host."""
