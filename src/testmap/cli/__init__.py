"""
CLI commands for testmap.
"""

from testmap.cli.components import components_command
from testmap.cli.map import map_command
from testmap.cli.prune import prune_command

__all__ = [
    "components_command",
    "map_command",
    "prune_command",
]
