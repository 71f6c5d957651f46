"""AgentID: BankID-backed pseudonymous credentials for AI agents."""

__version__ = "0.1.0"
