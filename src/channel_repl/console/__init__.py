"""
Console subpackage: prompt ownership, menus, address entry, signing and the channel event bridge.
"""

from channel_repl.console.command_loop import CommandLoop
from channel_repl.console.event_bridge import ChannelEventBridge
from channel_repl.console.prompt_controller import PromptController
from channel_repl.console.signing import SigningCoordinator

__all__ = [
    "ChannelEventBridge",
    "CommandLoop",
    "PromptController",
    "SigningCoordinator",
]
