"""
Sweep - fan one unit of work out across many remote targets.

- sweep.execution: bounded worker-pool queue engine
- sweep.routing: result normalization and success/failure routing
- sweep.targets / sweep.modules: target lists and search modules
- sweep.runner: wires a full run together
"""

__version__ = "0.1.0"
