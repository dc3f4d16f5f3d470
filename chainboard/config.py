"""Command-line configuration of a data node."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class NodeConfig:
    node_id: str
    service_address: str
    chain_listener_address: str
    control_listener_address: str
    log_path: str
    token: str


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Message board data node")
    parser.add_argument("-id", "--id", dest="node_id", default="data-node", help="Node ID")
    parser.add_argument(
        "-service", "--service", dest="service_address", default=":0",
        help="Service address",
    )
    parser.add_argument(
        "-chain", "--chain", dest="chain_listener_address", default=":0",
        help="ReplicationHandler listener address",
    )
    parser.add_argument(
        "-control", "--control", dest="control_listener_address", default=":0",
        help="Control listener address",
    )
    parser.add_argument("-token", "--token", dest="token", default="", help="Token")
    parser.add_argument("-o", "--o", dest="log_path", default="", help="Log path")
    return parser


def load(argv: Optional[Sequence[str]] = None) -> NodeConfig:
    """Parse the node's options from argv (the process arguments by default)."""
    args = _parser().parse_args(argv)
    return NodeConfig(
        node_id=args.node_id,
        service_address=args.service_address,
        chain_listener_address=args.chain_listener_address,
        control_listener_address=args.control_listener_address,
        log_path=args.log_path,
        token=args.token,
    )