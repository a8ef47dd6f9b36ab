"""Bundled demo simulations built on the evolutionary engine."""

from simevo.problems.target_vector import TargetVectorPopulator, TargetVectorSim
from simevo.problems.xor_network import XorNetworkPopulator, XorNetworkSim

__all__ = [
    "TargetVectorPopulator",
    "TargetVectorSim",
    "XorNetworkPopulator",
    "XorNetworkSim",
]
