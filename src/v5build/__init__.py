"""v5build - build orchestrator for vexide/pros-rs VEX V5 projects."""

__version__ = "0.1.0"
